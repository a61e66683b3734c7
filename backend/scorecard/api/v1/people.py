"""
People endpoints.

Provides CRUD operations for the people who own metrics.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from scorecard.api.deps import get_hub
from scorecard.core.errors import ConflictError
from scorecard.db.base import get_db
from scorecard.models.person import Person
from scorecard.models.metric import Metric
from scorecard.realtime.hub import ChangeHub
from scorecard.schemas.common import DeletedResponse
from scorecard.schemas.person import PersonCreate, PersonUpdate, PersonResponse

router = APIRouter()


async def get_person_or_404(db: AsyncSession, person_id: str) -> Person:
    """Get person or raise 404."""
    result = await db.execute(select(Person).where(Person.id == person_id))
    person = result.scalar_one_or_none()
    if not person:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Person not found"
        )
    return person


async def ensure_email_available(db: AsyncSession, email: str, exclude_id: str = None) -> None:
    query = select(Person.id).where(Person.email == email)
    if exclude_id:
        query = query.where(Person.id != exclude_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise ConflictError(f"A person with email {email} already exists")


def _payload(person: Person) -> dict:
    return PersonResponse.model_validate(person).model_dump(mode="json", by_alias=True)


@router.get("", response_model=List[PersonResponse])
async def list_people(db: AsyncSession = Depends(get_db)):
    """List all people, alphabetically."""
    result = await db.execute(select(Person).order_by(Person.name, Person.created))
    return result.scalars().all()


@router.get("/{person_id}", response_model=PersonResponse)
async def get_person(person_id: str, db: AsyncSession = Depends(get_db)):
    """Get a single person by ID."""
    return await get_person_or_404(db, person_id)


@router.post("", response_model=PersonResponse, status_code=status.HTTP_201_CREATED)
async def create_person(
    data: PersonCreate,
    db: AsyncSession = Depends(get_db),
    hub: ChangeHub = Depends(get_hub)
):
    """Create a new person. Email addresses must be unique."""
    await ensure_email_available(db, data.email)

    person = Person(name=data.name, email=data.email)
    db.add(person)
    await db.commit()
    await db.refresh(person)

    await hub.notify("person_created", _payload(person))
    return person


@router.put("/{person_id}", response_model=PersonResponse)
async def update_person(
    person_id: str,
    data: PersonUpdate,
    db: AsyncSession = Depends(get_db),
    hub: ChangeHub = Depends(get_hub)
):
    """Update a person's name and email."""
    person = await get_person_or_404(db, person_id)
    await ensure_email_available(db, data.email, exclude_id=person_id)

    person.name = data.name
    person.email = data.email
    await db.commit()
    await db.refresh(person)

    await hub.notify("person_updated", _payload(person))
    return person


@router.delete("/{person_id}", response_model=DeletedResponse)
async def delete_person(
    person_id: str,
    db: AsyncSession = Depends(get_db),
    hub: ChangeHub = Depends(get_hub)
):
    """
    Delete a person.

    Refused while the person still owns metrics; reassign or delete those first.
    """
    person = await get_person_or_404(db, person_id)

    count_result = await db.execute(
        select(func.count(Metric.id)).where(Metric.owner_id == person_id)
    )
    metric_count = count_result.scalar() or 0
    if metric_count > 0:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "Cannot delete person because they own metrics",
                "metricCount": metric_count
            }
        )

    await db.delete(person)
    await db.commit()

    await hub.notify("person_deleted", {"id": person_id})
    return DeletedResponse(id=person_id)
