"""Chat message routes.

- POST /chats/{chat_id}/messages: Store a message and start its enrichment

The response is returned as soon as the message is stored; translation,
notifications and the assistant reply happen afterwards, either in the
worker or in a background task of this process.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from courier.api.deps import get_message_store, get_pipeline_deps
from courier.logging import get_request_id
from courier.responses import success_response
from courier.schemas.messages import MessageCreate
from courier.services import messages as messages_service
from courier.services.pipeline import process_message_created
from courier.services.stores import SqlMessageStore

router = APIRouter(tags=["messages"])


@router.post("/chats/{chat_id}/messages", status_code=201)
def post_message(
    chat_id: str,
    body: MessageCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    store: Annotated[SqlMessageStore, Depends(get_message_store)],
) -> dict:
    """Store a chat message and dispatch the enrichment pipeline.

    Returns:
        201 Created: {"data": MessageOut}

    Errors:
        E_INVALID_REQUEST (400): Missing sender_id / receiver_id
    """
    event = messages_service.create_message(store, chat_id, body)

    if messages_service.enqueue_pipeline_task(event, get_request_id()):
        dispatch = messages_service.DISPATCH_WORKER
    else:
        background_tasks.add_task(process_message_created, event, get_pipeline_deps(request))
        dispatch = messages_service.DISPATCH_IN_PROCESS

    return success_response(messages_service.message_out(event, dispatch).model_dump(mode="json"))
