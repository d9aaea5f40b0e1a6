"""Notifications API router.

Endpoints:
- GET /notifications, /notifications/unread, /notifications/unread-count
- GET /notifications/admin
- PATCH /notifications/mark-all-read, /notifications/{id}/read
- /notifications/{id}/reply, /notifications/{id}/replies
- PATCH /notifications/{id}/replies/{reply_id}/read
- DELETE /notifications - delete the actor's read notifications
"""

import uuid
from typing import Any

from fastapi import APIRouter

from grh.api.deps import CurrentActor, Notifications
from grh.core.responses import DataResponse, ListResponse, single_page
from grh.models import Notification, NotificationReply
from grh.schemas import MarkReadRequest, ReplyRequest

router = APIRouter()


def _notification_to_dict(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "recipient_user_id": notification.recipient_user_id,
        "sender_company_id": notification.sender_company_id,
        "type": notification.type,
        "payload": notification.payload,
        "read": notification.read,
        "posting_id": notification.posting_id,
        "interview_id": notification.interview_id,
        "application_id": notification.application_id,
        "offer_id": notification.offer_id,
        "contract_id": notification.contract_id,
        "mission_id": notification.mission_id,
        "training_id": notification.training_id,
        "created_at": notification.created_at,
    }


def _reply_to_dict(reply: NotificationReply) -> dict[str, Any]:
    return {
        "id": reply.id,
        "notification_id": reply.notification_id,
        "sender_id": reply.sender_id,
        "content": reply.content,
        "read": reply.read,
        "created_at": reply.created_at,
    }


@router.get("")
async def list_notifications(actor: CurrentActor, service: Notifications) -> ListResponse[dict]:
    return single_page([_notification_to_dict(n) for n in await service.list_mine(actor)])


@router.get("/unread")
async def list_unread_notifications(
    actor: CurrentActor, service: Notifications
) -> ListResponse[dict]:
    return single_page([_notification_to_dict(n) for n in await service.list_unread(actor)])


@router.get("/unread-count")
async def count_unread_notifications(
    actor: CurrentActor, service: Notifications
) -> DataResponse[dict]:
    return DataResponse(data={"count": await service.unread_count(actor)})


@router.get("/admin")
async def list_admin_notifications(
    actor: CurrentActor, service: Notifications
) -> ListResponse[dict]:
    return single_page([_notification_to_dict(n) for n in await service.list_for_admins(actor)])


@router.patch("/mark-all-read")
async def mark_all_notifications_read(
    actor: CurrentActor, service: Notifications
) -> DataResponse[dict]:
    marked = await service.mark_all_read(actor)
    return DataResponse(data={"marked": marked})


@router.delete("")
async def delete_read_notifications(
    actor: CurrentActor, service: Notifications
) -> DataResponse[dict]:
    deleted = await service.delete_read(actor)
    return DataResponse(data={"deleted": deleted})


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: uuid.UUID,
    actor: CurrentActor,
    service: Notifications,
    body: MarkReadRequest | None = None,
) -> DataResponse[dict]:
    read = body.read if body is not None else True
    notification = await service.mark_read(actor, notification_id, read)
    return DataResponse(data=_notification_to_dict(notification))


@router.post("/{notification_id}/reply", status_code=201)
async def reply_to_notification(
    notification_id: uuid.UUID,
    body: ReplyRequest,
    actor: CurrentActor,
    service: Notifications,
) -> DataResponse[dict]:
    reply = await service.reply(actor, notification_id, body.content)
    return DataResponse(message="Reply sent", data=_reply_to_dict(reply))


@router.get("/{notification_id}/replies")
async def list_notification_replies(
    notification_id: uuid.UUID, actor: CurrentActor, service: Notifications
) -> ListResponse[dict]:
    replies = await service.list_replies(actor, notification_id)
    return single_page([_reply_to_dict(r) for r in replies])


@router.patch("/{notification_id}/replies/{reply_id}/read")
async def mark_reply_read(
    notification_id: uuid.UUID,
    reply_id: uuid.UUID,
    actor: CurrentActor,
    service: Notifications,
) -> DataResponse[dict]:
    reply = await service.mark_reply_read(actor, notification_id, reply_id)
    return DataResponse(data=_reply_to_dict(reply))
