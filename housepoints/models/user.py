"""
User model: staff, students and guardians.
"""
from datetime import datetime
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from ..extensions import db


class UserRole(str, Enum):
    """Roles a user can hold."""
    ADMIN = 'admin'
    TEACHER = 'teacher'
    STUDENT = 'student'
    PARENT = 'parent'


STAFF_ROLES = (UserRole.ADMIN.value, UserRole.TEACHER.value)


class User(db.Model):
    """
    A person known to the school.

    Students belong to a house either directly (house_id) or through their
    class (class_id -> classes.house_id). Guardians link to students via
    the student's parent_id.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    role = db.Column(db.String(20), nullable=False, index=True)

    # Roster details (students)
    grade_level = db.Column(db.String(20))
    section = db.Column(db.String(20))
    parent_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    class_id = db.Column(db.Integer, db.ForeignKey('classes.id', ondelete='SET NULL'), index=True)
    house_id = db.Column(db.Integer, db.ForeignKey('houses.id', ondelete='SET NULL'), index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    school_class = db.relationship('SchoolClass', backref='students', foreign_keys=[class_id])
    house = db.relationship('House', backref='direct_students', foreign_keys=[house_id])
    parent = db.relationship('User', remote_side=[id], backref='children')

    def __repr__(self):
        return f'<User {self.username} ({self.role})>'

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def effective_house_id(self):
        """House the student's points count toward, direct assignment first."""
        if self.house_id:
            return self.house_id
        if self.school_class:
            return self.school_class.house_id
        return None

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_summary(self) -> dict:
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'grade_level': self.grade_level,
            'section': self.section,
        }

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'username': self.username,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'role': self.role,
            'grade_level': self.grade_level,
            'section': self.section,
            'parent_id': self.parent_id,
            'class_id': self.class_id,
            'house_id': self.house_id,
        }
