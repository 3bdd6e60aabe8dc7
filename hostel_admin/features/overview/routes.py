from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.database import get_db
from hostel_admin.lib.deps import get_current_user
from hostel_admin.schemas.overview import OverviewResponse, PropertyStatsResponse
from hostel_admin.schemas.user import CurrentUser
from hostel_admin.services.reconciliation_service import load_read_model

router = APIRouter(prefix="/overview", tags=["Overview"])


@router.get("", response_model=OverviewResponse)
async def get_overview(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Dashboard totals computed from a full reload of PGs, rooms and users.
    """
    read_model = await load_read_model(db)

    return OverviewResponse(
        properties=[
            PropertyStatsResponse(
                property_id=s.property_id,
                name=s.name,
                room_count=s.room_count,
                total_capacity=s.total_capacity,
                actual_occupancy=s.actual_occupancy,
                occupancy_rate=s.occupancy_rate,
                monthly_rent=s.monthly_rent,
                revenue=s.revenue,
            )
            for s in read_model.stats.values()
        ],
        total_properties=len(read_model.properties),
        total_rooms=len(read_model.rooms),
        total_users=len(read_model.users),
        total_capacity=read_model.total_capacity,
        actual_occupancy=read_model.actual_occupancy,
        occupancy_rate=read_model.occupancy_rate,
        revenue=read_model.revenue,
    )
