from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class Subscription(db.Model):
    __tablename__ = 'subscriptions'

    id = db.Column(db.Integer, primary_key=True)
    # Chat id the reminders are pushed to; exactly one of the columns below holds it
    address = db.Column(db.String(64), nullable=False, unique=True, index=True)
    user_id = db.Column(db.String(64), nullable=True)
    group_id = db.Column(db.String(64), nullable=True)
    room_id = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<Subscription {self.address}>'
