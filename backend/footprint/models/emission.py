from datetime import datetime
from footprint import db


class Emission(db.Model):
    """
    One logged activity with its CO2-equivalent value.

    `timestamp` is when the activity happened; `created_at` is when the
    record was stored. Both are naive UTC. Records are never updated.
    """
    __tablename__ = 'emissions'

    # Primary key and relationships
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    # Display name at logging time, used by leaderboards
    user_name = db.Column(db.String(120), nullable=True)

    category = db.Column(db.String(50), nullable=False)
    activity = db.Column(db.String(120), nullable=False)

    # kg CO2e, never negative
    value = db.Column(db.Float, nullable=False, default=0.0)

    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Indexes and constraints
    __table_args__ = (
        # Composite indexes for common queries
        db.Index('idx_emission_user_timestamp', 'user_id', 'timestamp'),
        db.Index('idx_emission_user_category', 'user_id', 'category'),
        db.CheckConstraint('value >= 0', name='ck_emission_value_non_negative'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'category': self.category,
            'activity': self.activity,
            'value': self.value,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<Emission {self.id} - User {self.user_id} - {self.category} {self.value}>'
