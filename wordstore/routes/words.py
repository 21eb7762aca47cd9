from __future__ import annotations

import json
import queue

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from ..errors import StorageFailure
from ..logs import OperationLogContext
from ..services.word_svc import get_store, list_words, add_word, clear_words

router = APIRouter()

# how often an idle stream wakes to send a keep-alive; a dropped client is
# only noticed on that write
_STREAM_POLL_SECONDS = 2.0


class WordAdd(BaseModel):
    word: str


@router.get("/api/words")
def api_words():
    try:
        return {"items": list_words()}
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/words/add")
def api_words_add(body: WordAdd):
    log = OperationLogContext("WORD_ADD")
    log.set_entity("WORD", body.word)
    log.set_payload(body.model_dump())
    try:
        log.set_before(list_words())
        add_word(body.word)
        log.set_after(list_words())
        log.write("OK")
        return {"message": "ok"}
    except StorageFailure as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/words/delete_all")
def api_words_delete_all():
    log = OperationLogContext("WORD_DELETE_ALL")
    try:
        log.set_before(list_words())
        clear_words()
        log.set_after(list_words())
        log.write("OK")
        return {"message": "ok"}
    except StorageFailure as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/api/words/stream")
def api_words_stream(limit: int | None = Query(None, ge=1)):
    """
    Server-sent events: the current snapshot first, then one event per change.
    With `limit` the stream ends after that many events.

    Each open stream occupies one threadpool worker, blocked waiting for the
    next snapshot, until the client goes away or `limit` is reached.
    """
    try:
        sub = get_store().observe_alphabetized()
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    def events():
        sent = 0
        try:
            while limit is None or sent < limit:
                try:
                    snapshot = sub.get(timeout=_STREAM_POLL_SECONDS)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                if snapshot is None:
                    return
                yield f"data: {json.dumps(snapshot, ensure_ascii=False)}\n\n"
                sent += 1
        finally:
            sub.cancel()

    return StreamingResponse(events(), media_type="text/event-stream")
