"""
Script loader: turns a user program into a World.

A script is Python source made of a leading import section, which may only
name the built-in booglanim modules, followed by exactly one
`async def get_world()` (plus any helpers it needs):

    from booglanim.anim import from_, move
    from booglanim.point import pt
    from booglanim.things import load_obj
    from booglanim.resources import ResourceTable
    from booglanim.world import World

    async def get_world():
        res = ResourceTable()
        ball = await load_obj("ball.png", res)
        return World(res, [ball], [from_(0, 24, move(ball, pt(100, 0)))], fps=24)

compile_script() validates and compiles the program without running any of
it. ScriptJob runs the compiled unit as an asyncio task; the job's
`running` flag is true from start() until the entry function has returned
or failed, so a host that cannot await it can poll instead.
"""

import ast
import asyncio
import builtins
import importlib
from dataclasses import dataclass, field
from types import CodeType, ModuleType
from typing import Any, Dict, List, Optional

from booglanim.errors import BooglanimError, ScriptCompileError, ScriptImportError, ScriptRuntimeError
from booglanim.things import resource_root
from booglanim.utils.logs import get_logger
from booglanim.world import World

log = get_logger("loader")

ENTRY_POINT = "get_world"
PACKAGE = "booglanim"
BUILTIN_MODULES = ("point", "anim", "things", "resources", "world")

# import name -> host module
CAPABILITIES: Dict[str, str] = {}
for _name in BUILTIN_MODULES:
    CAPABILITIES[_name] = f"{PACKAGE}.{_name}"
    CAPABILITIES[f"{PACKAGE}.{_name}"] = f"{PACKAGE}.{_name}"


@dataclass
class CompiledScript:
    filename: str
    code: CodeType
    modules: List[str] = field(default_factory=list)

    def namespace(self) -> Dict[str, Any]:
        env = dict(vars(builtins))
        env["__import__"] = _restricted_import
        return {"__name__": "__booglanim_script__", "__file__": self.filename, "__builtins__": env}


def _restricted_import(name, globals=None, locals=None, fromlist=(), level=0) -> ModuleType:
    if level != 0:
        raise ScriptImportError(f"relative import of {name!r} is not allowed")
    if name == PACKAGE:
        names = [n for n in (fromlist or ()) if n != "*"]
        if not names or any(n not in BUILTIN_MODULES for n in names):
            raise ScriptImportError(f"only {', '.join(BUILTIN_MODULES)} can be imported from {PACKAGE}")
        for n in names:
            importlib.import_module(CAPABILITIES[n])
        return importlib.import_module(PACKAGE)
    target = CAPABILITIES.get(name)
    if target is None:
        raise ScriptImportError(f"module {name!r} is not available to scripts")
    module = importlib.import_module(target)
    if name.startswith(PACKAGE + ".") and not fromlist:
        # `import booglanim.anim` binds the package name
        return importlib.import_module(PACKAGE)
    return module


def _check_import(node: ast.stmt) -> List[str]:
    if isinstance(node, ast.Import):
        for alias in node.names:
            if alias.name not in CAPABILITIES:
                raise ScriptImportError(f"module {alias.name!r} is not available to scripts", node.lineno)
        return [alias.name for alias in node.names]
    if node.level:
        raise ScriptImportError("relative imports are not allowed", node.lineno)
    if node.module == PACKAGE:
        for alias in node.names:
            if alias.name not in BUILTIN_MODULES:
                raise ScriptImportError(f"{PACKAGE}.{alias.name} is not available to scripts", node.lineno)
        return [f"{PACKAGE}.{alias.name}" for alias in node.names]
    if node.module not in CAPABILITIES:
        raise ScriptImportError(f"module {node.module!r} is not available to scripts", node.lineno)
    return [node.module]


def split_script(tree: ast.Module):
    """Split a parsed program into its leading import section and the rest."""
    body = list(tree.body)
    start = 0
    if body and isinstance(body[0], ast.Expr) and isinstance(getattr(body[0], "value", None), ast.Constant) \
            and isinstance(body[0].value.value, str):
        start = 1
    end = start
    while end < len(body) and isinstance(body[end], (ast.Import, ast.ImportFrom)):
        end += 1
    return body[start:end], body[end:]


def compile_script(source: str, filename: str = "<script>") -> CompiledScript:
    """
    Validate and compile a user program. Nothing in it is executed.

    Raises:
        ScriptCompileError: on syntax errors or a missing/duplicated/sync entry function
        ScriptImportError: on imports outside the built-in modules or after the import section
    """
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise ScriptCompileError(f"syntax error: {e.msg}", e.lineno) from e

    imports, rest = split_script(tree)
    modules: List[str] = []
    for node in imports:
        modules.extend(_check_import(node))

    leading = {id(node) for node in imports}
    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom)) and id(node) not in leading:
            raise ScriptImportError("imports must come before any other code", node.lineno)

    entries = [
        node for node in rest
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name == ENTRY_POINT
    ]
    if not entries:
        raise ScriptCompileError(f"script must define `async def {ENTRY_POINT}()`")
    if len(entries) > 1:
        raise ScriptCompileError(f"{ENTRY_POINT} is defined more than once", entries[1].lineno)
    if not isinstance(entries[0], ast.AsyncFunctionDef):
        raise ScriptCompileError(f"{ENTRY_POINT} must be declared with `async def`", entries[0].lineno)

    try:
        code = compile(tree, filename, "exec")
    except (SyntaxError, ValueError) as e:
        raise ScriptCompileError(f"cannot compile: {e}", getattr(e, "lineno", None)) from e
    log.debug(f"compiled {filename} using {modules}")
    return CompiledScript(filename=filename, code=code, modules=modules)


class ScriptJob:
    """One cooperative run of a compiled script on the current event loop."""

    def __init__(self, compiled: CompiledScript, resource_dir: Optional[str] = None):
        self.compiled = compiled
        self.resource_dir = resource_dir
        self.running = False
        self.world: Optional[World] = None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> "ScriptJob":
        if self._task is not None:
            raise RuntimeError("script job already started")
        self.running = True
        token = resource_root.set(self.resource_dir)
        try:
            self._task = asyncio.get_running_loop().create_task(self._unit())
        except RuntimeError:
            self.running = False
            raise
        finally:
            resource_root.reset(token)
        return self

    async def _unit(self) -> World:
        try:
            namespace = self.compiled.namespace()
            exec(self.compiled.code, namespace)
            world = await namespace[ENTRY_POINT]()
            if not isinstance(world, World):
                raise ScriptRuntimeError(
                    f"{ENTRY_POINT}() must return a World, got {type(world).__name__}"
                )
            self.world = world
            return world
        except BooglanimError:
            raise
        except Exception as e:
            raise ScriptRuntimeError(f"{self.compiled.filename}: {type(e).__name__}: {e}") from e
        finally:
            self.running = False

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def result(self) -> World:
        if self._task is None:
            raise RuntimeError("script job was never started")
        return self._task.result()

    async def wait(self, poll_interval: float = 0.1) -> World:
        """Poll the running flag without blocking the loop, then return the World."""
        while self.running:
            await asyncio.sleep(poll_interval)
        return self.result()

    def __await__(self):
        if self._task is None:
            raise RuntimeError("script job was never started")
        return self._task.__await__()


async def run_script(
    source: str,
    filename: str = "<script>",
    poll_interval: float = 0.1,
    resource_dir: Optional[str] = None,
) -> World:
    compiled = compile_script(source, filename)
    job = ScriptJob(compiled, resource_dir=resource_dir).start()
    return await job.wait(poll_interval)


__all__ = [
    "ENTRY_POINT",
    "BUILTIN_MODULES",
    "CAPABILITIES",
    "CompiledScript",
    "ScriptJob",
    "compile_script",
    "split_script",
    "run_script",
]
