"""
House Points entry point.
"""
import os
import sys
import traceback

print("[HousePoints] ========================================")
print("[HousePoints] Starting House Points v0.1.0")
print("[HousePoints] ========================================")

# Default to production for container deployment
config_name = os.getenv('FLASK_ENV', 'production')
print(f"[HousePoints] Config: {config_name}")
print(f"[HousePoints] PORT: {os.getenv('PORT', 'not set')}")
print(f"[HousePoints] DATABASE_URL: {'set' if os.getenv('DATABASE_URL') else 'NOT SET'}")
print(f"[HousePoints] REDIS_URL: {'set' if os.getenv('REDIS_URL') else 'NOT SET (notifications disabled)'}")

try:
    from housepoints import create_app
    app = create_app(config_name)
    print(f"[HousePoints] App created, routes: {len(list(app.url_map.iter_rules()))}")
except Exception as e:
    print(f"[HousePoints] FATAL ERROR during app creation: {e}")
    traceback.print_exc()
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') == 'development'
    )
