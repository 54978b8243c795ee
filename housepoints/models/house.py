"""
House and class models.

A house carries a denormalized running point total (points) that is kept
in step with the ledger by atomic increments on the write path and
repaired by reconciliation on the read path.
"""
from ..extensions import db


class House(db.Model):
    """A house (group) whose students' points roll up into one total."""
    __tablename__ = 'houses'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    color = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(500))
    logo_url = db.Column(db.String(500))

    # Cached sum of ledger points for students resolved into this house
    points = db.Column(db.Integer, nullable=False, default=0, server_default='0')

    def __repr__(self):
        return f'<House {self.name}: {self.points} pts>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'description': self.description,
            'logo_url': self.logo_url,
            'points': self.points,
        }


class SchoolClass(db.Model):
    """A class; students in it count toward the class's house unless assigned directly."""
    __tablename__ = 'classes'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    description = db.Column(db.String(500))
    house_id = db.Column(db.Integer, db.ForeignKey('houses.id', ondelete='SET NULL'), index=True)

    house = db.relationship('House', backref='classes')

    def __repr__(self):
        return f'<SchoolClass {self.name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'house_id': self.house_id,
        }
