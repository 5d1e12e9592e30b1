from datetime import datetime, timezone

from achievehub.extensions import db
from achievehub.security import hash_password, verify_password

ROLES = ("student", "faculty", "admin")
STAFF_ROLES = ("faculty", "admin")


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    username = db.Column(db.String(64), unique=True, nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    is_authenticated = True

    profile = db.relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    role_row = db.relationship("UserRole", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def set_password(self, password: str):
        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        valid, _ = verify_password(password, self.password_hash)
        return valid

    @property
    def role(self) -> str:
        return self.role_row.role if self.role_row else "student"

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def display_name(self) -> str:
        return self.username or self.name

    @property
    def initials(self) -> str:
        return (self.email or "U")[:2].upper()

    def __repr__(self):
        return f"<User id={self.id} {self.email} role={self.role}>"


class Profile(db.Model):
    __tablename__ = "profiles"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    avatar_url = db.Column(db.String(500), nullable=True)
    website = db.Column(db.String(500), nullable=True)
    department = db.Column(db.String(200), nullable=True)
    updated_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", back_populates="profile")


class UserRole(db.Model):
    __tablename__ = "user_roles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    role = db.Column(db.String(20), nullable=False, default="student")  # student|faculty|admin

    user = db.relationship("User", back_populates="role_row")

    __table_args__ = (
        db.CheckConstraint("role IN ('student', 'faculty', 'admin')", name="ck_user_role_label"),
    )
