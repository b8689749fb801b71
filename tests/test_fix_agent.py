"""
Unit Tests — Auto-Fix Applier
==============================
Bucket routing (applied / skipped / failed), id de-duplication and the
isolation of one failing fix from the rest of the batch.
"""
import re

import pytest

from deploy_doctor.agents.fix_agent import (
    NO_AUTOMATIC_FIX,
    NO_CHANGES_REQUIRED,
    UNKNOWN_ISSUE,
    AutoFixApplier,
    apply_known_auto_fixes,
    unique_issue_ids,
)
from deploy_doctor.models.fix_result import FixOutcome
from deploy_doctor.models.issue import DetectedIssue, Fixable, InfoOnly, IssueDefinition
from deploy_doctor.parser.known_issues import IssueRegistry, build_default_registry


ENTRYPOINT_DOCKERFILE = (
    "FROM python:3.10-slim\n"
    "COPY docker-entrypoint.sh /usr/local/bin/docker-entrypoint.sh\n"
    'ENTRYPOINT ["docker-entrypoint.sh"]\n'
)


def _definition(issue_id, remedy):
    return IssueDefinition(
        id=issue_id,
        title=issue_id,
        pattern=re.compile(re.escape(issue_id), re.IGNORECASE),
        remedy=remedy,
    )


def _boom(project_path):
    raise RuntimeError("disk on fire")


def _silent_boom(project_path):
    raise OSError()


def _noop(project_path):
    return FixOutcome(changed=False, reason="")


def _returns_nothing(project_path):
    return None


@pytest.fixture
def project(tmp_path):
    (tmp_path / "Dockerfile").write_text(ENTRYPOINT_DOCKERFILE, encoding="utf-8")
    return tmp_path


@pytest.fixture
def applier():
    return AutoFixApplier(build_default_registry())


# ===========================================================================
# 1. Id Handling
# ===========================================================================
class TestIssueIds:

    def test_dedupe_keeps_first_occurrence_order(self):
        ids = ["b", "a", "b", "", "a", "c"]
        assert unique_issue_ids(ids) == ["b", "a", "c"]

    def test_accepts_mixed_inputs(self):
        detected = DetectedIssue(id="corepack-registry-timeout", title="t")
        ids = unique_issue_ids(["docker-entrypoint-not-found", {"id": "vite-router-base-path"}, detected])
        assert ids == ["docker-entrypoint-not-found", "vite-router-base-path", "corepack-registry-timeout"]

    def test_none_is_empty(self):
        assert unique_issue_ids(None) == []


# ===========================================================================
# 2. Bucket Routing
# ===========================================================================
class TestApply:

    def test_duplicate_and_unknown_ids(self, applier, project):
        report = applier.apply(str(project), [
            "docker-entrypoint-not-found",
            "docker-entrypoint-not-found",
            "unknown-id",
        ])

        assert [e.id for e in report.applied] == ["docker-entrypoint-not-found"]
        assert report.applied[0].files == [str(project / "Dockerfile")]
        assert [(e.id, e.reason) for e in report.skipped] == [("unknown-id", UNKNOWN_ISSUE)]
        assert report.failed == []
        assert report.has_changes is True

    def test_info_only_is_skipped(self, applier, project):
        report = applier.apply(str(project), ["vite-router-base-path"])
        assert report.applied == []
        assert [(e.id, e.reason) for e in report.skipped] == [("vite-router-base-path", NO_AUTOMATIC_FIX)]

    def test_second_batch_skips_with_fix_reason(self, applier, project):
        applier.apply(str(project), ["docker-entrypoint-not-found"])
        report = applier.apply(str(project), ["docker-entrypoint-not-found"])

        assert report.applied == []
        assert report.skipped[0].id == "docker-entrypoint-not-found"
        assert "already looks compatible" in report.skipped[0].reason
        assert report.has_changes is False

    def test_missing_dockerfile_is_skipped_not_failed(self, applier, tmp_path):
        report = applier.apply(str(tmp_path), ["docker-entrypoint-not-found", "corepack-registry-timeout"])
        assert report.failed == []
        assert [e.id for e in report.skipped] == ["docker-entrypoint-not-found", "corepack-registry-timeout"]
        assert all(e.reason.startswith("Dockerfile not found at ") for e in report.skipped)

    def test_each_id_lands_in_exactly_one_bucket(self, applier, project):
        ids = ["docker-entrypoint-not-found", "corepack-registry-timeout", "vite-router-base-path", "nope"]
        report = applier.apply(str(project), ids)
        bucketed = [e.id for e in report.applied + report.skipped + report.failed]
        assert sorted(bucketed) == sorted(ids)

    def test_detected_issue_objects(self, applier, project):
        issue = DetectedIssue(id="docker-entrypoint-not-found", title="x", auto_fixable=True)
        report = applier.apply(str(project), [issue])
        assert [e.id for e in report.applied] == ["docker-entrypoint-not-found"]

    def test_empty_issue_list(self, applier, project):
        report = applier.apply(str(project), [])
        assert report.applied == report.skipped == report.failed == []


# ===========================================================================
# 3. Failure Isolation
# ===========================================================================
class TestFailures:

    def test_raising_patch_does_not_stop_batch(self, project):
        registry = IssueRegistry([
            _definition("explodes", Fixable(_boom)),
            *build_default_registry(),
        ])
        report = AutoFixApplier(registry).apply(str(project), ["explodes", "docker-entrypoint-not-found"])

        assert [(e.id, e.reason) for e in report.failed] == [("explodes", "disk on fire")]
        assert [e.id for e in report.applied] == ["docker-entrypoint-not-found"]

    def test_patch_returning_no_result_is_failed(self, project):
        registry = IssueRegistry([
            _definition("half-done", Fixable(_returns_nothing)),
            *build_default_registry(),
        ])
        report = AutoFixApplier(registry).apply(str(project), ["half-done", "docker-entrypoint-not-found"])

        assert [(e.id, e.reason) for e in report.failed] == [
            ("half-done", "Fix returned NoneType, expected FixOutcome"),
        ]
        assert [e.id for e in report.applied] == ["docker-entrypoint-not-found"]

    def test_undecodable_dockerfile_is_failed(self, applier, tmp_path):
        (tmp_path / "Dockerfile").write_bytes(b"FROM node:20\nRUN corepack enable \xff\xfe\n")

        report = applier.apply(str(tmp_path), ["corepack-registry-timeout", "vite-router-base-path"])

        assert [e.id for e in report.failed] == ["corepack-registry-timeout"]
        assert "utf-8" in report.failed[0].reason
        assert [e.id for e in report.skipped] == ["vite-router-base-path"]
        assert (tmp_path / "Dockerfile").read_bytes() == b"FROM node:20\nRUN corepack enable \xff\xfe\n"

    def test_empty_exception_message_uses_type_name(self, project):
        registry = IssueRegistry([_definition("quiet", Fixable(_silent_boom))])
        report = AutoFixApplier(registry).apply(str(project), ["quiet"])
        assert report.failed[0].reason == "OSError"

    def test_blank_reason_gets_default(self, project):
        registry = IssueRegistry([_definition("noop", Fixable(_noop))])
        report = AutoFixApplier(registry).apply(str(project), ["noop"])
        assert report.skipped[0].reason == NO_CHANGES_REQUIRED

    def test_non_callable_patch_is_skipped(self, project):
        registry = IssueRegistry([_definition("broken", Fixable(None))])
        report = AutoFixApplier(registry).apply(str(project), ["broken"])
        assert report.skipped[0].reason == NO_AUTOMATIC_FIX

    def test_empty_registry_skips_everything(self, project):
        report = AutoFixApplier(IssueRegistry()).apply(str(project), ["docker-entrypoint-not-found"])
        assert report.skipped[0].reason == UNKNOWN_ISSUE
        assert (project / "Dockerfile").read_text(encoding="utf-8") == ENTRYPOINT_DOCKERFILE


# ===========================================================================
# 4. Registry & Wrapper
# ===========================================================================
class TestRegistry:

    def test_default_registry_order(self):
        assert build_default_registry().ids() == [
            "docker-entrypoint-not-found",
            "corepack-registry-timeout",
            "vite-router-base-path",
        ]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            IssueRegistry([_definition("dup", InfoOnly()), _definition("dup", InfoOnly())])

    def test_lookup(self):
        registry = build_default_registry()
        assert "vite-router-base-path" in registry
        assert registry.get("missing") is None
        assert len(registry) == 3

    def test_wrapper_defaults_to_built_in_registry(self, project):
        report = apply_known_auto_fixes(str(project), ["docker-entrypoint-not-found"])
        assert report.changed_files() == [str(project / "Dockerfile")]
