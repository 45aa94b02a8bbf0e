from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db, transaction
from backoffice.models import RoomStatus
from backoffice.schemas.room import RoomCreate, RoomDelete, RoomTypeOut, RoomUpdate
from backoffice.services.room_service import RoomService

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("/check/{room_number}")
async def check_room(room_number: str, db: AsyncSession = Depends(get_db)):
    """Registry status of a single room (not date-based availability)."""
    room = await RoomService.get_room(db, room_number)
    if room.status != RoomStatus.AVAILABLE:
        return {
            "success": False,
            "message": "This room is not available for the following days.",
        }
    return {
        "success": True,
        "message": "Room is available",
        "room": {
            "room_id": room.id,
            "room_number": room.room_number,
            "room_type_id": room.room_type_id,
            "status": room.status.value,
        },
    }


@router.get("/admin/getRooms")
async def get_rooms(
    search: Optional[str] = None,
    room_type: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    rooms = await RoomService.list_rooms(db, search=search, room_type=room_type, status=status)
    return {"success": True, "data": rooms}


@router.get("/admin/getRoomTypes")
async def get_room_types(db: AsyncSession = Depends(get_db)):
    room_types = await RoomService.list_room_types(db)
    return {"success": True, "data": [RoomTypeOut.model_validate(rt) for rt in room_types]}


@router.post("/admin/addRoom")
async def add_room(payload: RoomCreate, db: AsyncSession = Depends(get_db)):
    async with transaction(db):
        room = await RoomService.add_room(db, payload)
    return {
        "success": True,
        "message": "Room added successfully",
        "room_id": room.id,
        "room_type_id": room.room_type_id,
    }


@router.post("/admin/updateRoom")
async def update_room(payload: RoomUpdate, db: AsyncSession = Depends(get_db)):
    async with transaction(db):
        await RoomService.update_room(db, payload)
    return {"success": True, "message": "Room updated successfully"}


@router.post("/admin/deleteRoom")
async def delete_room(payload: RoomDelete, db: AsyncSession = Depends(get_db)):
    async with transaction(db):
        deleted, skipped = await RoomService.delete_rooms(db, payload.resolved_ids())

    message = f"{deleted} room(s) deleted successfully."
    if skipped:
        message += f" Skipped rooms with active bookings: {', '.join(skipped)}"
    return {"success": True, "message": message, "deleted": deleted, "skipped": skipped}


@router.get("/admin/grouped")
async def grouped_rooms(db: AsyncSession = Depends(get_db)):
    return await RoomService.grouped_rooms(db)
