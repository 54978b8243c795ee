"""
Shared fixtures for House Points tests.

Every test gets a fresh in-memory database. Fixtures create the minimum
school: one house, one class in that house, a student in the class, a
teacher, an admin, a guardian of the student, one positive and one
negative behavior category, and a reward.
"""
import pytest

from housepoints import create_app
from housepoints.extensions import db
from housepoints.models import (
    User,
    UserRole,
    House,
    SchoolClass,
    BehaviorCategory,
    Reward,
)


@pytest.fixture
def app():
    """Create test application."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Test client."""
    return app.test_client()


@pytest.fixture
def db_session(app):
    """The app's database session."""
    return db.session


def _make_user(username, role, **kwargs):
    user = User(
        username=username,
        first_name=kwargs.pop('first_name', username.title()),
        last_name=kwargs.pop('last_name', 'Test'),
        email=f'{username}@school.test',
        role=role,
        **kwargs
    )
    user.set_password('password123')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def sample_house(app):
    """A house with no points."""
    house = House(name='Phoenix', color='#D32F2F', points=0)
    db.session.add(house)
    db.session.commit()
    return house


@pytest.fixture
def other_house(app):
    """A second house, for reassignment tests."""
    house = House(name='Griffin', color='#1976D2', points=0)
    db.session.add(house)
    db.session.commit()
    return house


@pytest.fixture
def sample_class(app, sample_house):
    """A class that belongs to sample_house."""
    school_class = SchoolClass(name='5A', house_id=sample_house.id)
    db.session.add(school_class)
    db.session.commit()
    return school_class


@pytest.fixture
def sample_guardian(app):
    return _make_user('guardian', UserRole.PARENT.value)


@pytest.fixture
def sample_student(app, sample_class, sample_guardian):
    """A student in sample_class (so in sample_house through the class)."""
    return _make_user(
        'student',
        UserRole.STUDENT.value,
        grade_level='5',
        section='A',
        class_id=sample_class.id,
        parent_id=sample_guardian.id,
    )


@pytest.fixture
def second_student(app, sample_class):
    return _make_user('student2', UserRole.STUDENT.value, class_id=sample_class.id)


@pytest.fixture
def sample_teacher(app):
    return _make_user('teacher', UserRole.TEACHER.value)


@pytest.fixture
def sample_admin(app):
    return _make_user('admin', UserRole.ADMIN.value)


@pytest.fixture
def sample_category(app):
    """Positive category worth 5."""
    category = BehaviorCategory(name='Academic Excellence', is_positive=True, point_value=5)
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def negative_category(app):
    """Negative category worth 1."""
    category = BehaviorCategory(name='Tardiness', is_positive=False, point_value=1)
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def sample_reward(app):
    """Reward costing 3 points with 5 in stock."""
    reward = Reward(name='Homework Pass', point_cost=3, quantity=5)
    db.session.add(reward)
    db.session.commit()
    return reward


def headers_for(user):
    """Request headers that identify the caller (dev header auth)."""
    return {
        'X-User-ID': str(user.id),
        'Content-Type': 'application/json'
    }


@pytest.fixture(name='headers_for')
def headers_for_fixture():
    return headers_for
