"""
Connectivity endpoint
"""
from fastapi import APIRouter, Depends
from app.core.deps import get_network_monitor
from app.schemas.offline_queue import NetworkStatusOut
from app.services.network_service import NetworkMonitor

router = APIRouter()


@router.get("/status", response_model=NetworkStatusOut)
def network_status_endpoint(network: NetworkMonitor = Depends(get_network_monitor)):
    """
    Advisory connectivity signal.

    A connected result does not promise the next write will succeed.
    """
    return NetworkStatusOut(connected=network.is_connected())
