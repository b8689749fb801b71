"""
Unit Tests — Dockerfile Fixes
==============================
Covers the entrypoint-path fix and the registry-mirror fix:
    - rewrite and insertion anchors
    - idempotence (second run is a no-op)
    - missing Dockerfile produces no writes
    - CRLF handling
"""
import os

import pytest

from deploy_doctor.core.constants import ENTRYPOINT_NORMALIZE_COMMAND
from deploy_doctor.services.dockerfile_fixes import (
    MIRROR_ENV_LINES,
    dockerfile_path,
    fix_corepack_registry_mirror,
    fix_docker_entrypoint_not_found,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _write(project, content: str) -> str:
    path = dockerfile_path(str(project))
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    return path


def _read(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


STANDARD_DOCKERFILE = "\n".join([
    "FROM python:3.10-slim",
    "WORKDIR /app",
    "COPY docker-entrypoint.sh /usr/local/bin/docker-entrypoint.sh",
    'ENTRYPOINT ["docker-entrypoint.sh"]',
    'CMD ["python", "app.py"]',
    "",
])

NODE_DOCKERFILE = "\n".join([
    "FROM node:20-slim",
    "WORKDIR /app",
    "RUN corepack enable",
    "COPY . .",
    "RUN pnpm install --frozen-lockfile",
    'CMD ["pnpm", "start"]',
    "",
])


# ===========================================================================
# 1. Entrypoint Path Fix
# ===========================================================================
class TestEntrypointFix:

    def test_standard_scenario(self, tmp_path):
        path = _write(tmp_path, STANDARD_DOCKERFILE)

        outcome = fix_docker_entrypoint_not_found(str(tmp_path))

        assert outcome.changed is True
        assert outcome.files == [path]
        lines = _read(path).split("\n")
        assert lines == [
            "FROM python:3.10-slim",
            "WORKDIR /app",
            "COPY docker-entrypoint.sh /usr/local/bin/docker-entrypoint.sh",
            ENTRYPOINT_NORMALIZE_COMMAND,
            'ENTRYPOINT ["/usr/local/bin/docker-entrypoint.sh"]',
            'CMD ["python", "app.py"]',
            "",
        ]

    def test_normalize_command_literal(self):
        assert ENTRYPOINT_NORMALIZE_COMMAND == (
            "RUN sed -i 's/\\r$//' /usr/local/bin/docker-entrypoint.sh"
            " && chmod +x /usr/local/bin/docker-entrypoint.sh"
        )

    def test_idempotent(self, tmp_path):
        path = _write(tmp_path, STANDARD_DOCKERFILE)

        first = fix_docker_entrypoint_not_found(str(tmp_path))
        after_first = _read(path)
        second = fix_docker_entrypoint_not_found(str(tmp_path))

        assert first.changed is True
        assert second.changed is False
        assert "already looks compatible" in second.reason
        assert second.files == []
        assert _read(path) == after_first
        assert after_first.count(ENTRYPOINT_NORMALIZE_COMMAND) == 1

    def test_missing_dockerfile(self, tmp_path):
        outcome = fix_docker_entrypoint_not_found(str(tmp_path))

        assert outcome.changed is False
        assert os.path.join(str(tmp_path), "Dockerfile") in outcome.reason
        assert outcome.files == []
        assert os.listdir(tmp_path) == []

    def test_inserts_before_entrypoint_without_copy(self, tmp_path):
        path = _write(tmp_path, "FROM alpine\nENTRYPOINT ['docker-entrypoint.sh']\n")

        outcome = fix_docker_entrypoint_not_found(str(tmp_path))

        assert outcome.changed is True
        assert _read(path) == (
            "FROM alpine\n"
            f"{ENTRYPOINT_NORMALIZE_COMMAND}\n"
            'ENTRYPOINT ["/usr/local/bin/docker-entrypoint.sh"]\n'
        )

    def test_appends_at_end_without_anchor(self, tmp_path):
        path = _write(tmp_path, 'FROM alpine\nRUN echo docker-entrypoint.sh\n\n\n')

        outcome = fix_docker_entrypoint_not_found(str(tmp_path))

        assert outcome.changed is True
        assert _read(path) == (
            "FROM alpine\nRUN echo docker-entrypoint.sh\n"
            f"{ENTRYPOINT_NORMALIZE_COMMAND}\n"
        )

    def test_relative_dot_slash_entrypoint(self, tmp_path):
        path = _write(tmp_path, 'FROM alpine\nCOPY docker-entrypoint.sh /usr/local/bin/\nENTRYPOINT ["./docker-entrypoint.sh", "serve"]\n')

        fix_docker_entrypoint_not_found(str(tmp_path))

        content = _read(path)
        assert 'ENTRYPOINT ["/usr/local/bin/docker-entrypoint.sh", "serve"]' in content

    def test_no_script_reference_is_noop(self, tmp_path):
        original = 'FROM alpine\nENTRYPOINT ["/app/run.sh"]\n'
        path = _write(tmp_path, original)

        outcome = fix_docker_entrypoint_not_found(str(tmp_path))

        assert outcome.changed is False
        assert _read(path) == original

    def test_crlf_normalized_when_rewritten(self, tmp_path):
        path = _write(tmp_path, STANDARD_DOCKERFILE.replace("\n", "\r\n"))

        outcome = fix_docker_entrypoint_not_found(str(tmp_path))

        assert outcome.changed is True
        content = _read(path)
        assert "\r" not in content.replace(ENTRYPOINT_NORMALIZE_COMMAND, "")
        assert ENTRYPOINT_NORMALIZE_COMMAND in content

    def test_already_fixed_crlf_file_untouched(self, tmp_path):
        fixed = "\r\n".join([
            "FROM alpine",
            "COPY docker-entrypoint.sh /usr/local/bin/docker-entrypoint.sh",
            ENTRYPOINT_NORMALIZE_COMMAND,
            'ENTRYPOINT ["/usr/local/bin/docker-entrypoint.sh"]',
            "",
        ])
        path = _write(tmp_path, fixed)

        outcome = fix_docker_entrypoint_not_found(str(tmp_path))

        assert outcome.changed is False
        assert _read(path) == fixed

    def test_unrelated_content_preserved(self, tmp_path):
        extra = "# keep me\nARG VERSION=1\nLABEL maintainer=\"ops\"\n"
        path = _write(tmp_path, extra + STANDARD_DOCKERFILE)

        fix_docker_entrypoint_not_found(str(tmp_path))

        assert _read(path).startswith(extra)


# ===========================================================================
# 2. Registry Mirror Fix
# ===========================================================================
class TestRegistryMirrorFix:

    def test_inserts_after_from(self, tmp_path):
        path = _write(tmp_path, NODE_DOCKERFILE)

        outcome = fix_corepack_registry_mirror(str(tmp_path))

        assert outcome.changed is True
        assert outcome.files == [path]
        lines = _read(path).split("\n")
        assert lines[0] == "FROM node:20-slim"
        assert lines[1] == "ENV COREPACK_NPM_REGISTRY=https://registry.npmmirror.com \\"
        assert lines[2] == "    npm_config_registry=https://registry.npmmirror.com"
        assert lines[3] == "WORKDIR /app"

    def test_inserts_after_first_from_not_at_top(self, tmp_path):
        path = _write(tmp_path, "# syntax=docker/dockerfile:1\nARG NODE=20\n" + NODE_DOCKERFILE)

        fix_corepack_registry_mirror(str(tmp_path))

        lines = _read(path).split("\n")
        assert lines[:3] == ["# syntax=docker/dockerfile:1", "ARG NODE=20", "FROM node:20-slim"]
        assert tuple(lines[3:5]) == MIRROR_ENV_LINES

    def test_prepends_without_from(self, tmp_path):
        path = _write(tmp_path, "RUN corepack enable\n")

        fix_corepack_registry_mirror(str(tmp_path))

        assert _read(path) == "\n".join(MIRROR_ENV_LINES) + "\nRUN corepack enable\n"

    def test_idempotent(self, tmp_path):
        _write(tmp_path, NODE_DOCKERFILE)

        first = fix_corepack_registry_mirror(str(tmp_path))
        second = fix_corepack_registry_mirror(str(tmp_path))

        assert first.changed is True
        assert second.changed is False
        assert second.reason == "Registry mirror already configured."

    @pytest.mark.parametrize("existing", [
        "ENV npm_config_registry=https://example.org",
        "ENV COREPACK_NPM_REGISTRY=https://example.org",
    ])
    def test_existing_mirror_is_noop(self, tmp_path, existing):
        original = f"FROM node:20\n{existing}\nRUN corepack enable\n"
        path = _write(tmp_path, original)

        outcome = fix_corepack_registry_mirror(str(tmp_path))

        assert outcome.changed is False
        assert _read(path) == original

    def test_no_corepack_is_noop(self, tmp_path):
        original = "FROM node:20\nRUN npm ci\n"
        path = _write(tmp_path, original)

        outcome = fix_corepack_registry_mirror(str(tmp_path))

        assert outcome.changed is False
        assert outcome.reason == "No corepack usage detected in Dockerfile."
        assert _read(path) == original

    def test_missing_dockerfile(self, tmp_path):
        outcome = fix_corepack_registry_mirror(str(tmp_path))
        assert outcome.changed is False
        assert outcome.reason.startswith("Dockerfile not found at ")
        assert os.listdir(tmp_path) == []
