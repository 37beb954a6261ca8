"""Generate a Python package from a specification document.

:func:`generate_api` is the pipeline's front door: parse (unless handed a
:class:`~specgen.models.ParsedSpec`), render every artifact, write them.

Rendering fans out on a :class:`~concurrent.futures.ThreadPoolExecutor`:
one task per definition module, one for ``request_types.py``, one for
``client.py`` and one for the spec module.  Each task renders from the
immutable IR into its own :class:`~specgen.render.context.RenderContext`,
so tasks share nothing mutable.  Results fan back in before anything is
written, sorted by path, so output is identical from run to run.

The generated package layout::

    <out_dir>/
        __init__.py         binds the model modules, exports the client
        <Definition>.py     one per definition
        request_types.py    with request types enabled
        client.py           with the client enabled
        <spec_module>.py    with a spec module name set
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from specgen.exceptions import InvalidUsageError
from specgen.models import GenerationOptions, ParsedSpec
from specgen.parser.extractor import parse_spec
from specgen.parser.flatten import FragmentLoader
from specgen.parser.loader import SpecSource
from specgen.render import (
    RenderContext,
    client_class_name,
    render,
    render_all_operations,
    render_client,
    render_definition,
    render_spec_module,
    value_definitions,
)
from specgen.render.naming import class_name, sanitize_identifier
from specgen.writer import ArtifactWriter, write_artifact

logger = logging.getLogger(__name__)

REQUEST_TYPES_MODULE = "request_types.py"
CLIENT_MODULE = "client.py"
PACKAGE_INIT = "__init__.py"


@dataclass(frozen=True)
class Artifact:
    """One generated file: its path relative to the output directory, and its text."""

    path: Path
    text: str


def render_artifacts(parsed: ParsedSpec, options: GenerationOptions) -> list[Artifact]:
    """Render every artifact of *parsed*, without writing anything.

    Args:
        parsed: The parsed document.
        options: Selects the artifacts and how models are emitted.

    Returns:
        The artifacts, sorted by path.

    Raises:
        InvalidUsageError: If the spec module would overwrite another artifact.
        RenderError: If a template fails.
    """
    known = frozenset(parsed.definitions)
    values = value_definitions(parsed.definitions)
    tasks: list[Callable[[], Artifact]] = []

    for name, definition in parsed.definitions.items():
        tasks.append(_definition_task(name, definition, options, known, values))

    if options.generate_request_types:
        tasks.append(
            lambda: Artifact(
                Path(REQUEST_TYPES_MODULE),
                render_all_operations(
                    parsed.operations,
                    options.generate_response_decoders,
                    RenderContext(known_definitions=known),
                )[0],
            )
        )
    if options.generate_client:
        tasks.append(
            lambda: Artifact(
                Path(CLIENT_MODULE),
                render_client(parsed.meta, parsed.operations, RenderContext(known_definitions=known))[0],
            )
        )
    if options.spec_module:
        module = sanitize_identifier(options.spec_module, fallback="spec")
        _check_spec_module(f"{module}.py", parsed, options)
        document = parsed.document or {}
        tasks.append(lambda: Artifact(Path(f"{module}.py"), render_spec_module(document)))

    tasks.append(
        lambda: Artifact(
            Path(PACKAGE_INIT),
            render(
                "package_init.py.j2",
                {
                    "title": parsed.meta.title or "the API",
                    "models": sorted(class_name(name) for name in parsed.definitions),
                    "client_class": client_class_name(parsed.meta)
                    if options.generate_client
                    else None,
                },
            ),
        )
    )

    logger.debug(
        "Rendering %d artifacts with concurrency %s", len(tasks), options.concurrency or "auto"
    )
    with ThreadPoolExecutor(max_workers=options.concurrency) as executor:
        futures = [executor.submit(task) for task in tasks]
        artifacts = [future.result() for future in futures]
    return sorted(artifacts, key=lambda artifact: str(artifact.path))


def _check_spec_module(path: str, parsed: ParsedSpec, options: GenerationOptions) -> None:
    taken = {PACKAGE_INIT}
    taken.update(f"{class_name(name)}.py" for name in parsed.definitions)
    if options.generate_request_types:
        taken.add(REQUEST_TYPES_MODULE)
    if options.generate_client:
        taken.add(CLIENT_MODULE)
    if path in taken:
        raise InvalidUsageError(f"Spec module {path} would overwrite a generated module")


def _definition_task(
    name: str,
    definition: Any,
    options: GenerationOptions,
    known: frozenset[str],
    values: frozenset[str],
) -> Callable[[], Artifact]:
    def task() -> Artifact:
        context = RenderContext(known_definitions=known, value_definitions=values)
        text, _ = render_definition(name, definition, options, context)
        return Artifact(Path(f"{class_name(name)}.py"), text)

    return task


def generate_api(
    source: Union[SpecSource, ParsedSpec],
    out_dir: Union[str, Path],
    options: Optional[GenerationOptions] = None,
    writer: ArtifactWriter = write_artifact,
    loader: Optional[FragmentLoader] = None,
) -> list[Path]:
    """Generate the package for *source* into *out_dir*.

    Args:
        source: A path, URL, ``-`` for stdin, a parsed document, or an
            already built :class:`~specgen.models.ParsedSpec`.
        out_dir: Directory of the generated package.
        options: Generation options; defaults when ``None``.
        writer: Persists each artifact; atomic file writes by default.
        loader: Fragment loader for external pointers.

    Returns:
        The paths written, sorted.

    Raises:
        SpecParseError: If the document cannot be loaded or parsed.
        InvalidUsageError: If the spec module would overwrite another artifact.
        RenderError: If a template fails.

    Example::

        written = generate_api("api.yaml", "generated/petstore",
                               GenerationOptions(generate_client=True))
    """
    options = options or GenerationOptions()
    parsed = source if isinstance(source, ParsedSpec) else parse_spec(source, options, loader)
    logger.debug(
        "Generating %d definitions and %d operations",
        len(parsed.definitions),
        len(parsed.operations),
    )

    out_path = Path(out_dir)
    written: list[Path] = []
    for artifact in render_artifacts(parsed, options):
        path = out_path / artifact.path
        writer(path, artifact.text)
        written.append(path)
    return written
