"""FastAPI web application for taskmatrix."""

import logging
from datetime import date, time
from typing import Dict, List, Optional
from fastapi import Depends, FastAPI, HTTPException, Query, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from taskmatrix.database.database import SessionLocal, init_db
from taskmatrix.database.repository import SessionScopedRepository
from taskmatrix.engine.board import BoardBusyError, TaskBoard
from taskmatrix.engine.explanations import render_explanation
from taskmatrix.engine.urgency import due_status, resolve_due
from taskmatrix.integrations.openai_client import ClassificationError, OpenAIClassifier
from taskmatrix.models.task import ClassificationRecord, DueStatus, Explanation

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="taskmatrix API",
    description="Eisenhower-matrix task prioritization with deterministic guardrails over LLM scores",
    version="0.1.0"
)

_board: Optional[TaskBoard] = None


def get_board() -> TaskBoard:
    """Get or create the application board (dependency for FastAPI)."""
    global _board
    if _board is None:
        init_db()
        board = TaskBoard(
            classifier=OpenAIClassifier(),
            persistence=SessionScopedRepository(SessionLocal),
        )
        board.load()
        _board = board
    return _board


# Request/response models
class ClassifyRequest(BaseModel):
    """Request to classify a new task."""
    text: str = Field(..., description="Task description")
    due_at: Optional[int] = Field(None, description="Due timestamp (ms since epoch)")
    due_date: Optional[date] = Field(None, description="Local due date (used when due_at is absent)")
    due_time: Optional[time] = Field(None, description="Local due time (defaults to 18:00)")


class TaskResponse(BaseModel):
    """A record together with its display-ready fields."""
    task: ClassificationRecord
    display_explanation: Explanation
    due_status: DueStatus


class TaskListResponse(BaseModel):
    tasks: List[TaskResponse]


class BoardResponse(BaseModel):
    """Board view: open tasks per quadrant, done tasks and counts."""
    open_by_quadrant: Dict[str, List[TaskResponse]]
    done: List[TaskResponse]
    open_count: int
    done_count: int
    quadrant_counts: Dict[str, int]
    busy: bool
    last_error: Optional[str]
    query: str
    now: int


class ClearResponse(BaseModel):
    cleared_count: int


def _task_response(board: TaskBoard, record: ClassificationRecord) -> TaskResponse:
    return TaskResponse(
        task=record,
        display_explanation=render_explanation(record, board.locale),
        due_status=due_status(record.due_at, board.now, board.time_zone),
    )


@app.get("/", response_class=HTMLResponse)
async def root():
    """Root endpoint with basic UI."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>taskmatrix</title>
        <style>
            body { font-family: Arial, sans-serif; max-width: 960px; margin: 40px auto; padding: 20px; }
            button { padding: 8px 16px; margin: 4px; cursor: pointer; }
            .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 12px; }
            .quadrant { border: 1px dashed #ccc; border-radius: 8px; padding: 10px; min-height: 120px; }
            .task { padding: 6px 0; border-bottom: 1px solid #eee; cursor: pointer; }
            .error { color: #b00; }
        </style>
    </head>
    <body>
        <h1>taskmatrix</h1>
        <div>
            <input id="text" size="60" placeholder="任务描述">
            <input id="due_date" type="date">
            <input id="due_time" type="time">
            <button id="submit" onclick="classify()">分析</button>
        </div>
        <div>
            <input id="query" placeholder="搜索任务关键词..." oninput="refresh()">
            <button onclick="clearAll()">清空本地所有数据</button>
        </div>
        <p id="status"></p>
        <div class="grid" id="board"></div>
        <h3 id="done_title"></h3>
        <div id="done"></div>

        <script>
            function taskNode(item, done) {
                const node = document.createElement('div');
                node.className = 'task';
                node.onclick = () => toggle(item.task.id);
                const text = document.createElement(done ? 's' : 'span');
                text.textContent = item.task.original_text;
                node.appendChild(text);
                if (!done) {
                    const meta = document.createElement('small');
                    meta.textContent = ` U:${item.task.u_score} I:${item.task.i_score} ${item.due_status}`;
                    node.appendChild(meta);
                }
                return node;
            }

            function errorMessage(detail) {
                if (Array.isArray(detail)) {
                    return detail.map(err => err.msg).join('; ');
                }
                return String(detail);
            }

            function showStatus(message, isError) {
                const status = document.getElementById('status');
                status.textContent = message;
                status.className = isError ? 'error' : '';
            }

            async function refresh() {
                const q = encodeURIComponent(document.getElementById('query').value);
                const response = await fetch('/board?q=' + q);
                const data = await response.json();
                const board = document.getElementById('board');
                board.replaceChildren();
                for (const [quadrant, items] of Object.entries(data.open_by_quadrant)) {
                    const box = document.createElement('div');
                    box.className = 'quadrant';
                    const title = document.createElement('h3');
                    title.textContent = `${quadrant} (${items.length})`;
                    box.appendChild(title);
                    items.forEach(item => box.appendChild(taskNode(item, false)));
                    board.appendChild(box);
                }
                document.getElementById('done_title').textContent = `已完成任务 (${data.done_count})`;
                document.getElementById('done').replaceChildren(...data.done.map(item => taskNode(item, true)));
                document.getElementById('submit').disabled = data.busy;
            }

            async function classify() {
                const body = { text: document.getElementById('text').value };
                const dueDate = document.getElementById('due_date').value;
                const dueTime = document.getElementById('due_time').value;
                if (dueDate) { body.due_date = dueDate; }
                if (dueTime) { body.due_time = dueTime; }
                document.getElementById('submit').disabled = true;
                showStatus('分析中...', false);
                try {
                    const response = await fetch('/tasks/classify', {
                        method: 'POST',
                        headers: { 'Content-Type': 'application/json' },
                        body: JSON.stringify(body)
                    });
                    const data = await response.json();
                    if (!response.ok) {
                        showStatus(errorMessage(data.detail), true);
                    } else {
                        showStatus(`${data.task.quadrant_label}: ${data.display_explanation.next_action}`, false);
                        document.getElementById('text').value = '';
                    }
                } catch (error) {
                    showStatus(error.message, true);
                }
                refresh();
            }

            async function toggle(id) {
                await fetch(`/tasks/${id}/toggle`, { method: 'POST' });
                refresh();
            }

            async function clearAll() {
                if (confirm('确定要清空所有任务吗？此操作不可撤销。')) {
                    await fetch('/tasks?confirm=true', { method: 'DELETE' });
                    refresh();
                }
            }

            refresh();
            setInterval(refresh, 60000);
        </script>
    </body>
    </html>
    """


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/board", response_model=BoardResponse)
async def view_board(q: Optional[str] = None, board: TaskBoard = Depends(get_board)):
    """Board view, optionally filtered by a search query."""
    board.tick()
    if q is not None:
        board.set_query(q)
    snapshot = board.snapshot()
    return BoardResponse(
        open_by_quadrant={
            quadrant: [_task_response(board, record) for record in records]
            for quadrant, records in snapshot.open_by_quadrant.items()
        },
        done=[_task_response(board, record) for record in snapshot.done],
        open_count=snapshot.open_count,
        done_count=snapshot.done_count,
        quadrant_counts=snapshot.quadrant_counts,
        busy=snapshot.busy,
        last_error=snapshot.last_error,
        query=snapshot.query,
        now=snapshot.now,
    )


@app.post("/board/dismiss-error", status_code=204)
def dismiss_error(board: TaskBoard = Depends(get_board)):
    """Clear the last classification error shown on the board."""
    board.dismiss_error()
    return Response(status_code=204)


@app.get("/tasks", response_model=TaskListResponse)
async def list_tasks(q: Optional[str] = None, board: TaskBoard = Depends(get_board)):
    """List tasks newest first, optionally filtered by a search query."""
    board.tick()
    return TaskListResponse(tasks=[_task_response(board, record) for record in board.store.search(q)])


@app.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, board: TaskBoard = Depends(get_board)):
    record = board.store.get(task_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    board.tick()
    return _task_response(board, record)


@app.post("/tasks/classify", response_model=TaskResponse, status_code=201)
async def classify_task(request: ClassifyRequest, board: TaskBoard = Depends(get_board)):
    """Classify a task with the remote classifier and add the corrected record."""
    due_at = request.due_at
    if due_at is None and request.due_date is not None:
        due_at = resolve_due(request.due_date, request.due_time, board.time_zone)

    try:
        record = await board.submit(request.text, due_at)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except BoardBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ClassificationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _task_response(board, record)


@app.post("/tasks/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(task_id: str, board: TaskBoard = Depends(get_board)):
    """Mark a task done, or restore a done task to open."""
    record = board.toggle_status(task_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return _task_response(board, record)


@app.delete("/tasks/{task_id}", status_code=204)
def delete_task(task_id: str, board: TaskBoard = Depends(get_board)):
    """Delete a task permanently (no-op if absent)."""
    board.remove(task_id)
    return Response(status_code=204)


@app.delete("/tasks", response_model=ClearResponse)
def clear_tasks(confirm: bool = Query(False), board: TaskBoard = Depends(get_board)):
    """Delete every task. Requires confirm=true."""
    try:
        count = board.clear(confirm=confirm)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ClearResponse(cleared_count=count)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
