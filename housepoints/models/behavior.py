"""
Behavior categories and the points ledger.
"""
from datetime import datetime
from ..extensions import db


class BehaviorCategory(db.Model):
    """
    A reason points are awarded or deducted.

    point_value is always positive; is_positive decides the sign of the
    canonical award.
    """
    __tablename__ = 'behavior_categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    description = db.Column(db.String(500))
    is_positive = db.Column(db.Boolean, nullable=False)
    point_value = db.Column(db.Integer, nullable=False)

    def __repr__(self):
        return f'<BehaviorCategory {self.name} ({"+" if self.is_positive else "-"}{self.point_value})>'

    @property
    def signed_value(self) -> int:
        return self.point_value if self.is_positive else -self.point_value

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'is_positive': self.is_positive,
            'point_value': self.point_value,
        }


class PointTransaction(db.Model):
    """
    One award or deduction. Immutable once written.

    Rows are only removed by the administrative reset / purge operations.
    """
    __tablename__ = 'point_transactions'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey('behavior_categories.id'), nullable=False)

    points = db.Column(db.Integer, nullable=False)  # Positive for award, negative for deduction
    note = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    # Relationships
    student = db.relationship('User', foreign_keys=[student_id])
    author = db.relationship('User', foreign_keys=[author_id])
    category = db.relationship('BehaviorCategory')

    def __repr__(self):
        return f'<PointTransaction {self.id}: {self.points} pts for student {self.student_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'student_id': self.student_id,
            'author_id': self.author_id,
            'category_id': self.category_id,
            'points': self.points,
            'note': self.note,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def to_dict_detailed(self):
        data = self.to_dict()
        data['student'] = self.student.to_summary() if self.student else None
        data['author'] = {
            'id': self.author.id,
            'first_name': self.author.first_name,
            'last_name': self.author.last_name,
        } if self.author else None
        data['category'] = self.category.to_dict() if self.category else None
        return data
