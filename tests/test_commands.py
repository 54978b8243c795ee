"""
Tests for the `flask points` CLI commands.
"""
from housepoints.extensions import db
from housepoints.models import House, BehaviorCategory, Reward, User, PointTransaction
from housepoints.services import LedgerService


class TestPointsCommands:
    """Tests for seed, reconcile, reset and create-admin."""

    def test_seed_then_seed_again(self, app):
        """Seeding fills empty tables once and skips them afterwards."""
        runner = app.test_cli_runner()

        result = runner.invoke(args=['points', 'seed'])
        assert result.exit_code == 0
        assert 'houses: 4 created' in result.output

        again = runner.invoke(args=['points', 'seed'])
        assert 'houses: 0 created' in again.output
        assert House.query.count() == 4
        assert BehaviorCategory.query.count() > 0
        assert Reward.query.count() > 0

    def test_reconcile_reports_fix(self, app, sample_student, sample_teacher, sample_category, sample_house):
        with app.app_context():
            LedgerService().record_points(sample_student.id, sample_teacher.id, sample_category.id, 5)
            house = db.session.get(House, sample_house.id)
            house.points = 50
            db.session.commit()

        result = app.test_cli_runner().invoke(args=['points', 'reconcile', '--house-id', str(sample_house.id)])

        assert result.exit_code == 0
        assert '[FIXED]' in result.output
        assert '1 corrected' in result.output

    def test_reconcile_unknown_house(self, app):
        result = app.test_cli_runner().invoke(args=['points', 'reconcile', '--house-id', '99999'])
        assert result.exit_code != 0

    def test_reset_requires_yes(self, app, sample_student, sample_teacher, sample_category):
        with app.app_context():
            LedgerService().record_points(sample_student.id, sample_teacher.id, sample_category.id, 5)

        runner = app.test_cli_runner()
        refused = runner.invoke(args=['points', 'reset'])
        assert refused.exit_code != 0
        assert PointTransaction.query.count() == 1

        done = runner.invoke(args=['points', 'reset', '--yes'])
        assert done.exit_code == 0
        assert PointTransaction.query.count() == 0

    def test_create_admin(self, app):
        result = app.test_cli_runner().invoke(args=[
            'points', 'create-admin',
            '--username', 'principal',
            '--email', 'principal@school.test',
            '--password', 'longpassword',
        ])
        assert result.exit_code == 0
        user = User.query.filter_by(username='principal').first()
        assert user.role == 'admin'
        assert user.check_password('longpassword')
