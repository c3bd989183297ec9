from fastapi import APIRouter, Depends, status
from models.schemas import HabitCreate, HabitUpdate, User, HabitResponse, HabitListResponse, DeleteResponse
from config.database import get_async_supabase_client
from supabase._async.client import AsyncClient
from routers.auth import get_current_user

# Import service functions
from .services.habit_crud_service import (
    create_habit_service,
    get_user_habits_service,
    get_habit_service,
    delete_habit_service,
    update_habit_service
)
from .services.habit_completion_service import (
    toggle_habit_completion_service
)

router = APIRouter()

@router.get("", response_model=HabitListResponse)
async def get_habits(
    current_user: User = Depends(get_current_user),
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Get all habits of the current user"""
    habits = await get_user_habits_service(current_user, supabase)
    return HabitListResponse(count=len(habits), data=habits)

@router.post("", response_model=HabitResponse, status_code=status.HTTP_201_CREATED)
async def create_habit(
    habit: HabitCreate,
    current_user: User = Depends(get_current_user),
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Create a new habit"""
    return HabitResponse(data=await create_habit_service(habit, current_user, supabase))

@router.get("/{habit_id}", response_model=HabitResponse)
async def get_habit(
    habit_id: str,
    current_user: User = Depends(get_current_user),
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Get a specific habit by ID"""
    return HabitResponse(data=await get_habit_service(habit_id, current_user, supabase))

@router.put("/{habit_id}", response_model=HabitResponse)
async def update_habit(
    habit_id: str,
    habit: HabitUpdate,
    current_user: User = Depends(get_current_user),
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Update a habit"""
    return HabitResponse(data=await update_habit_service(habit_id, habit, current_user, supabase))

@router.delete("/{habit_id}", response_model=DeleteResponse)
async def delete_habit(
    habit_id: str,
    current_user: User = Depends(get_current_user),
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Delete a habit (hard delete)"""
    await delete_habit_service(habit_id, current_user, supabase)
    return DeleteResponse()

@router.put("/{habit_id}/complete", response_model=HabitResponse)
async def toggle_habit_completion(
    habit_id: str,
    current_user: User = Depends(get_current_user),
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Toggle habit completion for today"""
    return HabitResponse(data=await toggle_habit_completion_service(habit_id, current_user, supabase))
