from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from escola.api.deps import get_current_user, get_or_404
from escola.db.session import get_db
from escola.models import CalendarEvent
from escola.schemas.calendar import CalendarEventIn, CalendarEventOut, CalendarEventUpdate

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("", response_model=list[CalendarEventOut])
def list_events(
    start: date | None = Query(None, description="Eventos que comecam a partir desta data"),
    end: date | None = Query(None, description="Eventos que comecam ate esta data"),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    q = select(CalendarEvent)
    if start is not None:
        q = q.where(CalendarEvent.start_date >= start)
    if end is not None:
        q = q.where(CalendarEvent.start_date <= end)

    return db.execute(q.order_by(CalendarEvent.start_date, CalendarEvent.id)).scalars().all()


@router.post("", response_model=CalendarEventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: CalendarEventIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    event = CalendarEvent(**payload.model_dump())
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@router.post("/import", response_model=list[CalendarEventOut])
def import_events(payload: list[CalendarEventIn], db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    """Upsert em lote: mesmo titulo + mesma data de inicio = mesmo evento."""
    saved = []

    for item in payload:
        event = db.execute(
            select(CalendarEvent)
            .where(CalendarEvent.title == item.title)
            .where(CalendarEvent.start_date == item.start_date)
            .order_by(CalendarEvent.id)
        ).scalars().first()

        if event:
            for field, value in item.model_dump().items():
                setattr(event, field, value)
        else:
            event = CalendarEvent(**item.model_dump())
            db.add(event)
            db.flush()
        saved.append(event)

    db.commit()
    return saved


@router.get("/{event_id}", response_model=CalendarEventOut)
def get_event(event_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return get_or_404(db, CalendarEvent, event_id, "event")


@router.patch("/{event_id}", response_model=CalendarEventOut)
def update_event(event_id: int, payload: CalendarEventUpdate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    event = get_or_404(db, CalendarEvent, event_id, "event")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(event, field, value)

    db.commit()
    db.refresh(event)
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, CalendarEvent, event_id, "event"))
    db.commit()
    return None
