"""
User Model for Store Map Service.

Represents an account that can log in to the admin API.

Roles:
- admin: Full access to the admin API
- user: Can authenticate but cannot modify store data
"""

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from storemap.models import db, DateTimeUTC, utcnow


# Role hierarchy - higher number means more privileges
USER_ROLES = {
    'admin': 2,
    'user': 1,
}


class User(UserMixin, db.Model):
    """
    SQLAlchemy model representing a user account.

    Attributes:
        id: Auto-increment identifier
        username: Unique login name
        password_hash: Hashed password (never store plaintext)
        role: User's role ('admin' or 'user')
        created_at: Timestamp when the user was created
    """

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='user')
    created_at = db.Column(DateTimeUTC, default=utcnow)

    def set_password(self, password):
        """
        Hash and store the password.

        Uses werkzeug's generate_password_hash for secure hashing.

        Args:
            password: Plain text password to hash and store
        """
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256')

    def check_password(self, password):
        """
        Verify a password against the stored hash.

        Args:
            password: Plain text password to verify

        Returns:
            True if password matches, False otherwise
        """
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def get_role_level(self):
        """Numeric privilege level of this user's role (0 if unknown)."""
        return USER_ROLES.get(self.role, 0)

    def to_dict(self):
        """
        Serialize the user for API responses. The password hash is never
        included.
        """
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        """String representation for debugging."""
        return f'<User {self.username} role={self.role}>'
