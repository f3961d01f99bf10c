"""Shared fixtures: quiet structured logging and a small sample site."""

import logging
from pathlib import Path

import pytest
import structlog

REACT_POST = """---
title: "Compound Components in React"
date: 2025-11-28
draft: false
tags: ["React", "Patterns", "Frontend"]
categories: ["Engineering"]
author: "Site Author"
showToc: true
TocOpen: false
description: "Sharing implicit state between components without prop drilling."
cover:
  image: "/images/react-compound.png"
  alt: "Component tree"
  caption: "Compound components share state through context"
  relative: false
---

Compound components let a parent own state while children render it.

```jsx
<Tabs>
  <Tabs.List />
  <Tabs.Panel />
</Tabs>
```
"""

DOCKER_POST = """---
title: "Docker Multi-Stage Builds"
date: 2025-09-01
tags:
  - Docker
  - DevOps
categories:
  - Engineering
description: "Smaller images by separating build and runtime stages."
---

Use one stage to compile and another to run.

```dockerfile
FROM golang:1.22 AS build
FROM gcr.io/distroless/base
```
"""

GO_POST = """+++
title = "Clean Architecture in Go"
date = 2025-09-01T08:30:00Z
tags = ["Go", "Architecture"]
categories = ["Engineering"]
+++

Keep the domain independent of transport and storage.
"""

PORTFOLIO_ENTRY = """---
title: "Personal Finance Dashboard"
date: 2024-06-15
tags: ["React", "Go"]
categories: ["Portfolio"]
weight: 2
---

A case study of a dashboard built with React and a Go API.
"""

DRAFT_POST = """---
title: "Notes on Docker Networking"
date: 2025-12-05
draft: true
tags: ["Docker"]
---

Work in progress.
"""

BROKEN_POST = """---
title: "Unterminated"
date: 2025-10-10

This file never closes its front matter.
"""


@pytest.fixture(autouse=True)
def quiet_structlog():
    """Route structlog output nowhere so tests see only command output."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.ReturnLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


def write_site(root: Path, files: dict[str, str]) -> Path:
    """Write ``files`` (identifier -> text) under ``root``."""
    for identifier, text in files.items():
        path = root / identifier
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def site_files() -> dict[str, str]:
    return {
        "posts/react-compound-components.md": REACT_POST,
        "posts/docker-multi-stage.md": DOCKER_POST,
        "posts/go-clean-architecture/index.md": GO_POST,
        "posts/docker-networking.md": DRAFT_POST,
        "portfolio/finance-dashboard.md": PORTFOLIO_ENTRY,
    }


@pytest.fixture
def site_dir(tmp_path, site_files) -> Path:
    """A valid sample content directory."""
    return write_site(tmp_path / "content", site_files)


@pytest.fixture
def broken_site_dir(tmp_path, site_files) -> Path:
    """The sample site plus one file with an unterminated front matter."""
    files = {**site_files, "posts/broken.md": BROKEN_POST}
    return write_site(tmp_path / "content", files)
