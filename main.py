import asyncio
import dataclasses
import logging
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field, ValidationError

from config import InterpreterSettings
from errors import BasicError
from interpreter import Interpreter
from lexer import lex
from parser import Parser, SemanticAnalyzer
from variables import VariableStore

logger = logging.getLogger(__name__)

app = FastAPI(title="Mini BASIC IDE", version="1.0.0")

# Upper bound for a caller-supplied iteration cap.
MAX_REQUEST_ITERATIONS = 100_000


# --- Request models ---
class CodeRequest(BaseModel):
    code: str


class ExecuteRequest(CodeRequest):
    max_iterations: Optional[int] = Field(None, ge=1, le=MAX_REQUEST_ITERATIONS)


# --- Helpers ---

class WebInterpreter(Interpreter):
    """Interpreter that hands output events to a callback instead of a stream."""

    def __init__(self, program, variables, settings, emit):
        super().__init__(program, variables, settings)
        self.emit = emit

    def _output(self, text):
        self.emit({"type": "output", "data": text})

    def _clear(self):
        self.emit({"type": "clear"})


def ast_to_dict(node):
    if isinstance(node, list):
        return [ast_to_dict(item) for item in node]
    if not dataclasses.is_dataclass(node):
        return node
    result = {"type": type(node).__name__}
    for field in dataclasses.fields(node):
        result[field.name] = ast_to_dict(getattr(node, field.name))
    return result


def token_to_dict(token):
    token = token.without_marker()
    return {"type": token.type.name, "value": token.value, "line": token.line}


def error_payload(error):
    payload = {"success": False, "error": f"{type(error).__name__}: {error}"}
    if isinstance(error, BasicError):
        payload["phase"] = error.phase
        payload["line"] = error.line_number
    return payload


def run_program(code, settings, emit):
    """Runs code with a fresh variable store, sending events to emit. Returns the Halt."""
    variables = VariableStore()
    program = Parser(lex(code), variables).parse_program()
    return WebInterpreter(program, variables, settings, emit).run()


def settings_for(max_iterations=None):
    return InterpreterSettings.from_env(max_iterations=max_iterations)


async def stream_execution(websocket: WebSocket, code: str, max_iterations=None):
    """Runs the program in a worker thread and forwards its events as they arrive."""
    loop = asyncio.get_running_loop()
    queue = asyncio.Queue()

    def emit(event):
        loop.call_soon_threadsafe(queue.put_nowait, event)

    def work():
        try:
            halt = run_program(code, settings_for(max_iterations), emit)
            emit({"type": "execution_finished", "success": True, "halt": halt.value})
        except Exception as e:
            logger.debug("streamed run failed: %s", e)
            emit({"type": "execution_finished", **error_payload(e)})

    worker = loop.run_in_executor(None, work)
    await websocket.send_json({"type": "execution_started"})
    while True:
        event = await queue.get()
        await websocket.send_json(event)
        if event["type"] == "execution_finished":
            break
    await worker


# --- API endpoints ---
@app.post("/api/compile")
async def compile_code(request: CodeRequest):
    try:
        token_lines = lex(request.code)
        variables = VariableStore()
        program = Parser(token_lines, variables).parse_program()
        warnings = SemanticAnalyzer(program).analyze()
    except BasicError as e:
        return error_payload(e)

    return {
        "success": True,
        "tokens": [[token_to_dict(token) for token in line] for line in token_lines],
        "ast": ast_to_dict(program),
        "variables": variables.as_dict(),
        "warnings": warnings,
    }


@app.post("/api/execute")
def execute_code(request: ExecuteRequest):
    events = []
    try:
        halt = run_program(request.code, settings_for(request.max_iterations), events.append)
    except BasicError as e:
        return {**error_payload(e), "output": events}
    return {"success": True, "halt": halt.value, "output": events}


@app.websocket("/api/execute-stream")
async def execute_stream(websocket: WebSocket):
    await websocket.accept()
    try:
        data = await websocket.receive_json()
        try:
            request = ExecuteRequest(code=data.get("code", ""), max_iterations=data.get("max_iterations"))
        except ValidationError as e:
            await websocket.send_json({"type": "execution_finished", "success": False, "error": str(e)})
            return
        await stream_execution(websocket, request.code, request.max_iterations)
    except WebSocketDisconnect:
        pass


@app.get("/api/examples")
async def get_examples():
    return {
        "hello": {"name": "Hello", "code": '10 PRINT "HELLO WORLD"\n20 END'},
        "variables": {"name": "Variables", "code": '10 X%=5\n20 Y$="HI THERE"\n30 PRINT X\n40 PRINT Y\n50 END'},
        "branch": {
            "name": "IF/THEN jump",
            "code": '10 X%=5\n20 IF X=5 THEN 50\n30 PRINT "NOT FIVE"\n40 END\n50 PRINT "FIVE"\n60 END',
        },
        "block": {
            "name": "IF/THEN block",
            "code": '10 N$=BOB\n20 IF N=BOB THEN\n30  PRINT "HELLO"\n40  PRINT N\n50 END',
        },
    }
