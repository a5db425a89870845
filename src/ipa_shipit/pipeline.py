"""
Release pipeline.

High-level flow (strictly in order, no backtracking):
1) Validate the selector (workspace XOR project, scheme, configuration default).
2) Resolve project -> scheme -> target -> build configuration -> Info.plist.
3) Confirm bundle id / version string and optionally bump the build number.
4) Offer to remove stale artifacts, then build the .ipa (or keep the old one).
5) Upload the .ipa when requested, then copy the fresh .xcarchive when requested.

Any `SystemExit` raised by a stage aborts the run; later stages never start.
"""

from __future__ import annotations

import os
from datetime import datetime

from . import build, loader, metadata, publish
from .options import resolve_selector
from .runner import CommandRunner
from .types import ArtifactSet, ResolvedProject, RunState, Selector, Stage

UPLOAD_BANNER = """************************
**  Upload selected...
**  Make sure your app is in the 'Waiting for upload' state on iTunes Connect
************************"""


def _log_step(message: str) -> None:
    print(f"[ipa-shipit] {message}")


class Ship:
    """Owns every piece of per-run state for a single release invocation."""

    def __init__(
        self,
        selector: Selector,
        *,
        upload: bool = False,
        archive: bool = False,
        verbose: bool = False,
        runner: CommandRunner | None = None,
        cwd: str = "",
    ) -> None:
        self.selector = selector
        self.upload = upload
        self.archive = archive
        self.verbose = verbose
        self.runner = runner or CommandRunner(verbose=verbose)
        self.cwd = cwd or os.getcwd()
        self.state = RunState()
        self.project: ResolvedProject | None = None
        self.artifacts: ArtifactSet | None = None

    def _advance(self, stage: Stage) -> None:
        self.state.stage = stage
        self.state.history.append(stage)

    def it(self) -> RunState:
        """Run every stage; re-raises the terminal error after marking the run aborted."""
        try:
            self.setup()
            self.build()
            self.shipit()
            self.archive_build()
        except SystemExit:
            self._advance(Stage.ABORTED)
            raise
        self._advance(Stage.DONE)
        return self.state

    def setup(self) -> None:
        if self.upload:
            print(UPLOAD_BANNER)
        if self.verbose:
            print("Validating options and finding required files...")
        resolve_selector(self.selector)
        self._advance(Stage.VALIDATED)

        self.project = loader.load_build_context(self.selector, verbose=self.verbose)
        self._advance(Stage.RESOLVED)
        if self.verbose:
            print("So far so good...")

        _log_step(f"Confirming metadata in {os.path.basename(self.project.plist_path)}")
        metadata.update_metadata(self.project.plist_path, verbose=self.verbose)
        metadata.bump_build_number(self.runner, self.project.project_dir)
        self._advance(Stage.METADATA_CONFIRMED)

    def build(self) -> None:
        if self.project is None:
            raise RuntimeError("build() called before setup()")
        self.artifacts = build.stale_artifacts(self.project.product_name, self.cwd)
        keep, upload_old = build.cleanup_old_build(self.artifacts, self.cwd)
        self.state.keep_old_build = keep
        self.state.upload_old_build = upload_old
        if keep:
            _log_step(f"Keeping existing {self.artifacts.ipa_name}; skipping build")
            self._advance(Stage.SKIPPED)
            return

        self.state.build_started_at = datetime.now()
        self.state.build_finished_at = build.build_ipa(
            self.runner, self.selector, cwd=self.cwd, verbose=self.verbose
        )
        self._advance(Stage.BUILT)

    def shipit(self) -> None:
        if self.artifacts is None:
            raise RuntimeError("shipit() called before build()")
        if not (self.upload or self.state.upload_old_build):
            print("To upload your app to iTunes Connect, be sure to set the --upload option")
            self._advance(Stage.NOT_PUBLISHED)
            return

        if self.state.upload_old_build:
            print("Uploading previous build...")
        ipa_path = os.path.join(self.cwd, self.artifacts.ipa_name)
        _log_step(f"Uploading {self.artifacts.ipa_name}")
        publish.upload_ipa(self.runner, ipa_path, verbose=self.verbose)
        self._advance(Stage.PUBLISHED)

    def archive_build(self) -> None:
        if self.artifacts is None:
            raise RuntimeError("archive_build() called before build()")
        if not self.archive:
            self._advance(Stage.NOT_ARCHIVED)
            return
        if self.state.keep_old_build or self.state.build_finished_at is None:
            _log_step("Build was skipped; not copying an archive")
            self._advance(Stage.NOT_ARCHIVED)
            return

        product = self.artifacts.product_name
        finished = self.state.build_finished_at
        started = self.state.build_started_at or finished
        found = publish.find_archive(product, started, finished)
        dest = publish.copy_archive(found, product, cwd=self.cwd) if found else ""
        if not dest:
            print(f"Unable to find archive at: {publish.archive_path_for(product, finished)}")
            self._advance(Stage.NOT_ARCHIVED)
            return
        _log_step(f"Copied archive to {dest}")
        self._advance(Stage.ARCHIVED)
