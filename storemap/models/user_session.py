"""
UserSession Model for Store Map Service.

Represents an active login session with token-based authentication.
Deleting a session immediately invalidates its token.
"""

from datetime import datetime, timezone, timedelta
import secrets

from storemap.models import db, DateTimeUTC, utcnow

# Default session lifetime
DEFAULT_SESSION_HOURS = 24

class UserSession(db.Model):
    """
    SQLAlchemy model representing a user login session.

    Sessions are created upon successful login and validated on each
    authenticated request.

    Attributes:
        id: Auto-increment identifier
        user_id: Foreign key reference to the user who owns this session
        token: Unique, cryptographically secure session token
        expires_at: Timestamp when the session expires
        last_active: Timestamp of last activity using this session
        created_at: Timestamp when the session was created
    """

    __tablename__ = 'user_sessions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    expires_at = db.Column(DateTimeUTC, nullable=False)
    last_active = db.Column(DateTimeUTC, nullable=True)
    created_at = db.Column(DateTimeUTC, default=utcnow)

    # Relationships
    user = db.relationship('User', backref=db.backref('sessions', lazy='dynamic', cascade='all, delete-orphan'))

    @classmethod
    def generate_token(cls):
        """
        Generate a cryptographically secure session token.

        Returns:
            A 43-character URL-safe base64-encoded token (32 bytes of randomness)
        """
        return secrets.token_urlsafe(32)

    @classmethod
    def create_session(cls, user_id, hours=DEFAULT_SESSION_HOURS):
        """
        Create a new session for a user.

        Args:
            user_id: ID of the user to create session for
            hours: Session lifetime in hours

        Returns:
            New UserSession instance (not yet committed to database)
        """
        now = datetime.now(timezone.utc)
        return cls(
            user_id=user_id,
            token=cls.generate_token(),
            expires_at=now + timedelta(hours=hours),
            last_active=now,
        )

    def is_expired(self):
        """
        Check if the session has expired.

        Returns:
            True if current time is past expires_at, False otherwise
        """
        return datetime.now(timezone.utc) > self.expires_at

    def update_activity(self):
        """Update the last_active timestamp to current time."""
        self.last_active = datetime.now(timezone.utc)

    def __repr__(self):
        """String representation for debugging."""
        return f'<UserSession {self.id} user={self.user_id}>'
