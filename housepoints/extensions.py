"""
Flask extensions initialization.
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_caching import Cache

# Database
db = SQLAlchemy()

# Migrations
migrate = Migrate()

# Catalog cache (configured in utils.cache.init_cache)
cache = Cache()
