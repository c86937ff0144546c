# academy/routers/live_class.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_admin, get_current_user
from academy.models.admin import Admin
from academy.models.user import User
from academy.schemas.live_class import (
    LiveClassCreate,
    LiveClassJoinResponse,
    LiveClassParticipants,
    LiveClassResponse,
    LiveClassUpdate,
)
from academy.services.live_class import LiveClassService

router = APIRouter(
    prefix="/live-classes",
    tags=["Live Classes"],
    responses={404: {"description": "Not found"}},
)


# ==================== Admin Endpoints ====================


@router.post("/", response_model=LiveClassResponse, status_code=201)
def schedule_live_class(
    class_in: LiveClassCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return LiveClassService(db).schedule(current_admin.id, class_in)


@router.get("/admin/course/{course_id}", response_model=List[LiveClassResponse])
def list_course_live_classes(
    course_id: int,
    upcoming: bool = Query(False),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return LiveClassService(db).list_for_course(course_id, upcoming_only=upcoming)


@router.put("/{live_class_id}", response_model=LiveClassResponse)
def update_live_class(
    live_class_id: int,
    class_in: LiveClassUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    """Only classes that have not started can be changed."""
    return LiveClassService(db).update(live_class_id, class_in)


@router.patch("/{live_class_id}/start", response_model=LiveClassResponse)
def start_live_class(
    live_class_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return LiveClassService(db).start(live_class_id)


@router.patch("/{live_class_id}/end", response_model=LiveClassResponse)
def end_live_class(
    live_class_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return LiveClassService(db).end(live_class_id)


@router.patch("/{live_class_id}/cancel", response_model=LiveClassResponse)
def cancel_live_class(
    live_class_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return LiveClassService(db).cancel(live_class_id)


@router.delete("/{live_class_id}")
def delete_live_class(
    live_class_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    LiveClassService(db).delete(live_class_id)
    return {"success": True, "message": "Live class deleted successfully"}


@router.get("/{live_class_id}/participants", response_model=LiveClassParticipants)
def get_live_class_participants(
    live_class_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    participants = LiveClassService(db).get_participants(live_class_id)
    return {
        "live_class_id": live_class_id,
        "total": len(participants),
        "participants": participants,
    }


@router.post("/{live_class_id}/host", response_model=LiveClassJoinResponse)
def host_live_class(
    live_class_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    """Moderator link for the admin running the class."""
    return LiveClassService(db).admin_join(live_class_id, current_admin.name)


# ==================== Student Endpoints ====================


@router.get("/course/{course_id}", response_model=List[LiveClassResponse])
def list_my_course_live_classes(
    course_id: int,
    upcoming: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return LiveClassService(db).list_for_student(
        current_user.id, course_id, upcoming_only=upcoming
    )


@router.post("/{live_class_id}/join", response_model=LiveClassJoinResponse)
def join_live_class(
    live_class_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Meeting room details for an enrolled student.
    The room opens shortly before the scheduled start.
    """
    return LiveClassService(db).join(current_user, live_class_id)
