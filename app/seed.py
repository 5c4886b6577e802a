from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.db.session import SessionLocal
from app.models.enums import AnalysisType, RequestPriority, RequestStatus, UserRole
from app.models.profile import UserProfile
from app.models.request import AnalysisRequest

DEMO_PASSWORD = "changeme123"


def _profile(db: Session, email: str, role: UserRole, full_name: str) -> UserProfile:
    existing = db.execute(select(UserProfile).where(UserProfile.email == email)).scalar_one_or_none()
    if existing:
        return existing

    p = UserProfile(
        email=email,
        full_name=full_name,
        role=role.value,
        password_hash=hash_password(DEMO_PASSWORD),
        is_active=True,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def seed():
    db: Session = SessionLocal()

    designer = _profile(db, "designer@example.com", UserRole.DESIGNER, "Demo Designer")
    _profile(db, "analyst@example.com", UserRole.ANALYST, "Demo Analyst")
    _profile(db, "admin@example.com", UserRole.ADMIN, "Demo Admin")

    samples = [
        ("Front bumper crash check", "crash", "high", "Model A"),
        ("Brake disc thermal load", "thermal", "medium", "Model B"),
    ]
    for title, kind, priority, car_model in samples:
        req = AnalysisRequest(
            title=title,
            description=f"{AnalysisType(kind).value} analysis for {car_model}",
            car_model=car_model,
            analysis_type=kind,
            priority=RequestPriority(priority).value,
            requested_deadline=date.today() + timedelta(days=14),
            status=RequestStatus.PENDING.value,
            requester_id=designer.id,
        )
        db.add(req)

    db.commit()
    db.close()


if __name__ == "__main__":
    seed()
