"""Settings repository - branch hours and contacts"""

from sqlalchemy.orm import Session

from ...models import BranchContact, BranchOperatingHours


class SettingsRepository:
    @staticmethod
    def list_hours(db: Session, branch_id: int) -> list[BranchOperatingHours]:
        return (
            db.query(BranchOperatingHours)
            .filter(BranchOperatingHours.branch_id == branch_id)
            .order_by(BranchOperatingHours.day_of_week)
            .all()
        )

    @staticmethod
    def list_contacts(db: Session, branch_id: int) -> list[BranchContact]:
        return (
            db.query(BranchContact)
            .filter(BranchContact.branch_id == branch_id)
            .order_by(BranchContact.is_primary.desc(), BranchContact.id)
            .all()
        )

    @classmethod
    def upsert_hours(cls, db: Session, branch_id: int, entries: list[dict]) -> None:
        """Insert or update one row per (branch, day); caller commits"""
        existing = {row.day_of_week: row for row in cls.list_hours(db, branch_id)}
        for entry in entries:
            row = existing.get(entry["day_of_week"])
            if row is None:
                row = BranchOperatingHours(branch_id=branch_id, day_of_week=entry["day_of_week"])
                db.add(row)
            row.open_time = entry["open_time"]
            row.close_time = entry["close_time"]
            row.is_closed = entry["is_closed"]
        db.flush()

    @staticmethod
    def replace_contacts(db: Session, branch_id: int, entries: list[dict]) -> None:
        db.query(BranchContact).filter(BranchContact.branch_id == branch_id).delete(
            synchronize_session="fetch"
        )
        for entry in entries:
            db.add(BranchContact(branch_id=branch_id, **entry))
        db.flush()
