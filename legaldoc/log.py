import os

from rich.console import Console
from rich.markup import escape
from rich.traceback import install

console = Console(stderr=True)
install(show_locals=False)

# Verbose output if LEGALDOC_VERBOSE is truthy (not "", "0", "false")
_VERB = os.getenv("LEGALDOC_VERBOSE", "").strip().lower()
VERBOSE = _VERB not in ("", "0", "false", "no")

def debug(msg):
    if VERBOSE:
        console.log(f"[dim]DEBUG[/] {escape(str(msg))}")

def info(msg): console.log(f"[bold cyan]INFO[/] {escape(str(msg))}")
def warn(msg): console.log(f"[bold yellow]WARN[/] {escape(str(msg))}")
def err(msg):  console.log(f"[bold red]ERR[/] {escape(str(msg))}")
