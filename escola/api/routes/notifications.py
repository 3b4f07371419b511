from fastapi import APIRouter, Depends

from escola.api.deps import get_current_user, get_notifications
from escola.core.errors import NotFoundError
from escola.services.notifications import NotificationCenter

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(center: NotificationCenter = Depends(get_notifications), current_user = Depends(get_current_user)):
    items = center.list()
    return {"count": len(items), "items": [n.to_dict() for n in items]}


@router.post("/{notification_id}/dismiss")
def dismiss_notification(notification_id: str, center: NotificationCenter = Depends(get_notifications), current_user = Depends(get_current_user)):
    n = center.dismiss(notification_id)
    if n is None:
        raise NotFoundError("notification not found")
    # o cliente usa action_path pra navegar depois do clique
    return n.to_dict()
