import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["DEBUG"] = "false"
os.environ["LOG_LEVEL"] = "warning"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from academy.core.database import Base, SessionLocal, engine
from academy.core.hasher import PasswordHelper
from academy.core.security import jwt_manager
from academy.models import (
    Admin,
    Chapter,
    Coupon,
    Course,
    Enrollment,
    TextLecture,
    User,
    Video,
)
from main import app


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(setup_database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(setup_database):
    return TestClient(app)


# ============================================================================
# Factories
# ============================================================================
@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(email=None, full_name="Test Student"):
        counter["n"] += 1
        user = User(
            email=email or f"student{counter['n']}@example.com",
            hashed_password=PasswordHelper.hash_password("secret123"),
            full_name=full_name,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin(db):
    admin = Admin(
        name="Root",
        username="root",
        email="root@example.com",
        password=PasswordHelper.hash_password("Admin@123"),
        is_verified=True,
        level=999,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {jwt_manager.create_admin_token(admin)}"}


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {jwt_manager.create_access_token(user)}"}

    return _auth_headers


@pytest.fixture
def make_course(db):
    """Course with one chapter holding ``videos`` videos and ``lectures`` text lectures."""

    def _make_course(videos=0, lectures=0, price="100.00", discount_price=None):
        course = Course(
            title="Python Basics",
            description="Learn Python",
            price=Decimal(price),
            discount_price=Decimal(discount_price) if discount_price else None,
            is_published=True,
        )
        db.add(course)
        db.flush()

        chapter = Chapter(course_id=course.id, title="Getting started", order=1)
        db.add(chapter)
        db.flush()

        for i in range(videos):
            db.add(
                Video(
                    chapter_id=chapter.id,
                    course_id=course.id,
                    title=f"Video {i + 1}",
                    duration=100,
                    order=i + 1,
                )
            )
        for i in range(lectures):
            db.add(
                TextLecture(
                    chapter_id=chapter.id,
                    course_id=course.id,
                    title=f"Lecture {i + 1}",
                    upload_type="url",
                    order=i + 1,
                )
            )
        db.commit()
        db.refresh(course)
        return course

    return _make_course


@pytest.fixture
def make_coupon(db):
    def _make_coupon(code="SAVE20", **fields):
        data = {"type": "percentage", "value": Decimal("20"), "is_active": True}
        data.update(fields)
        coupon = Coupon(code=code, used_count=data.pop("used_count", 0), **data)
        db.add(coupon)
        db.commit()
        db.refresh(coupon)
        return coupon

    return _make_coupon


@pytest.fixture
def enroll(db):
    def _enroll(user, course):
        enrollment = Enrollment(
            user_id=user.id, course_id=course.id, progress=0, completed_lessons=[]
        )
        db.add(enrollment)
        db.commit()
        db.refresh(enrollment)
        return enrollment

    return _enroll
