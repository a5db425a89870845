import plistlib
from collections.abc import Callable

import pytest

from ipa_shipit import prompts
from ipa_shipit.types import CommandResult


class FakeRunner:
    """Records every command instead of spawning it; `handler` decides the result."""

    def __init__(self, handler: Callable[[tuple, str | None], CommandResult] | None = None) -> None:
        self.calls: list[tuple[tuple, str | None]] = []
        self._handler = handler

    def run(self, cmd, *, cwd=None) -> CommandResult:
        args = tuple(cmd)
        self.calls.append((args, cwd))
        if self._handler is not None:
            return self._handler(args, cwd)
        return CommandResult(args=args, returncode=0)

    def commands(self, program: str) -> list[tuple]:
        return [args for args, _cwd in self.calls if args and args[0] == program]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def scripted(monkeypatch):
    """
    Replace interactive prompts with queued answers.

    A queued `None` (or an exhausted queue) accepts the prompt's default.
    Returns the list of questions asked, in order.
    """

    def _install(*, asks=(), agrees=()) -> list[str]:
        ask_q, agree_q = list(asks), list(agrees)
        seen: list[str] = []

        def fake_ask(question: str, default: str = "") -> str:
            seen.append(question)
            value = ask_q.pop(0) if ask_q else None
            return default if value is None else value

        def fake_agree(question: str, default: bool) -> bool:
            seen.append(question)
            value = agree_q.pop(0) if agree_q else None
            return default if value is None else value

        monkeypatch.setattr(prompts, "ask", fake_ask)
        monkeypatch.setattr(prompts, "agree", fake_agree)
        return seen

    return _install


SCHEME_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Scheme LastUpgradeVersion = "1500" version = "1.7">
   <BuildAction parallelizeBuildables = "YES" buildImplicitDependencies = "YES">
      <BuildActionEntries>
         <BuildActionEntry buildForRunning = "YES" buildForArchiving = "YES">
            <BuildableReference
               BuildableIdentifier = "primary"
               BlueprintIdentifier = "F41FD0272E2A467000909132"
               BuildableName = "{target}.app"
               BlueprintName = "{target}"
               ReferencedContainer = "container:{project}.xcodeproj">
            </BuildableReference>
         </BuildActionEntry>
      </BuildActionEntries>
   </BuildAction>
</Scheme>
"""

WORKSPACE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Workspace version = "1.0">
   <FileRef location = "group:{project}.xcodeproj">
   </FileRef>
   <FileRef location = "group:Pods/Pods.xcodeproj">
   </FileRef>
</Workspace>
"""


def write_scheme(project_dir, scheme: str, target: str) -> None:
    schemes = project_dir / "xcshareddata" / "xcschemes"
    schemes.mkdir(parents=True, exist_ok=True)
    (schemes / f"{scheme}.xcscheme").write_text(
        SCHEME_XML.format(target=target, project=project_dir.stem)
    )


@pytest.fixture
def xcode_tree(tmp_path):
    """
    Lay out `App.xcworkspace` + `App.xcodeproj` (shared scheme `App`) and
    `App/Info.plist` under `tmp_path`. Returns the Info.plist path.
    """
    project = tmp_path / "App.xcodeproj"
    project.mkdir()
    (project / "project.pbxproj").write_text("// !$*UTF8*$!\n{}\n")
    write_scheme(project, "App", "App")

    workspace = tmp_path / "App.xcworkspace"
    workspace.mkdir()
    (workspace / "contents.xcworkspacedata").write_text(WORKSPACE_XML.format(project="App"))

    info = tmp_path / "App" / "Info.plist"
    info.parent.mkdir()
    with open(info, "wb") as f:
        plistlib.dump(
            {
                "CFBundleIdentifier": "com.example.app",
                "CFBundleShortVersionString": "1.2.0",
                "CFBundleVersion": "41",
            },
            f,
        )
    return info
