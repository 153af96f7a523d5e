import asyncio
import logging
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from tasknest.db.session import get_session
from tasknest.models.category import TaskFilter
from tasknest.api.deps import AuthContext, get_ws_auth_context, get_task_feed
from tasknest.services.live import TaskFeed, load_snapshot
from tasknest.services.task_view import derive_view

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/live")
async def live_tasks(
    websocket: WebSocket,
    filter: TaskFilter = Query(TaskFilter.all),
    context: AuthContext = Depends(get_ws_auth_context),
    session: Session = Depends(get_session),
    feed: TaskFeed = Depends(get_task_feed),
):
    """
    Push the caller's derived task view on every change.

    The client may send ``{"filter": "<key>"}`` at any time to switch views;
    the last snapshot is re-derived without a database round trip.
    """
    owner_id = context.user.id
    await websocket.accept()

    # Subscribe before the initial load so no change can slip between the two.
    async with feed.subscribe(owner_id) as subscription:
        tasks = await run_in_threadpool(load_snapshot, session, owner_id)
        # Release the connection while the socket idles
        session.close()
        await websocket.send_json(derive_view(tasks, filter).model_dump(mode="json"))

        receive = asyncio.ensure_future(websocket.receive_json())
        update = asyncio.ensure_future(subscription.next())
        try:
            while True:
                done, _ = await asyncio.wait({receive, update}, return_when=asyncio.FIRST_COMPLETED)

                if receive in done:
                    try:
                        message = receive.result()
                    except ValueError:
                        # Not JSON; the previous filter stays
                        receive = asyncio.ensure_future(websocket.receive_json())
                        await websocket.send_json({"error": "Invalid message"})
                        continue
                    receive = asyncio.ensure_future(websocket.receive_json())
                    requested = message.get("filter") if isinstance(message, dict) else None
                    try:
                        filter = TaskFilter(requested)
                    except ValueError:
                        await websocket.send_json({"error": f"Unknown task filter: {requested!r}"})
                        continue

                if update in done:
                    try:
                        tasks = update.result().tasks
                    except StopAsyncIteration:
                        break
                    update = asyncio.ensure_future(subscription.next())

                await websocket.send_json(derive_view(tasks, filter).model_dump(mode="json"))
        except WebSocketDisconnect:
            logger.info("Live client disconnected (owner=%s)", owner_id)
        finally:
            receive.cancel()
            update.cancel()
