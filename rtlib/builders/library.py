# SPDX-License-Identifier: MIT
"""Building library archives.

The LibraryBuilder turns a Library descriptor into a job graph for one
target and runs it:

    headers ─┬─> compile a.c ─┐
             ├─> compile b.c ─┼─> ar lib.a (+ store in cache)
             └─> compile crt1 ┘

The header job only exists for libraries that generate headers, the crt1
job only for libraries with a startup object. If the library is available
precompiled or from the cache, the graph is a single pass-through job.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path
from urllib.parse import quote

from rtlib.configure.config import BuildConfig
from rtlib.core.cache import ArtifactCache
from rtlib.core.errors import CommandError, ConfigureError, RtlibError, ToolError
from rtlib.core.flags import library_flags
from rtlib.core.library import Library
from rtlib.core.node import JobNode, passthrough
from rtlib.core.scheduler import Scheduler
from rtlib.tools.toolchain import Archiver, Compiler, Toolchain

logger = logging.getLogger(__name__)

# File names inside a cache entry.
ARCHIVE_NAME = "lib.a"
CRT1_NAME = "crt1.o"
INCLUDE_DIR = "include"


def object_name(source: str) -> str:
    """Object file name for a source path relative to the library root.

    The path is percent-encoded, so every source gets a distinct flat name
    even when base names repeat across directories.

    Examples:
        >>> object_name("lib/string/memcpy.c")
        'lib%2Fstring%2Fmemcpy.c.o'
        >>> object_name("a/b_c.c") != object_name("a_b/c.c")
        True
    """
    return quote(Path(source).as_posix(), safe="") + ".o"


class LibraryBuilder:
    """Builds library archives, using the artifact cache when possible.

    Example:
        builder = LibraryBuilder(
            LlvmToolchain.find(configure),
            libraries=default_libraries(root),
        )
        with tempfile.TemporaryDirectory() as tmpdir:
            archive = builder.load("compiler-rt", config, tmpdir)

    Attributes:
        compiler: Compiler used for every source file.
        archiver: Archiver creating the static library.
        libraries: Known libraries by name, for load() and plan() by name.
        jobs: Maximum number of parallel jobs (None for the default).
    """

    def __init__(
        self,
        toolchain: Toolchain | None = None,
        *,
        compiler: Compiler | None = None,
        archiver: Archiver | None = None,
        libraries: Mapping[str, Library] | None = None,
        jobs: int | None = None,
    ) -> None:
        if toolchain is not None:
            compiler = compiler or toolchain.compiler
            archiver = archiver or toolchain.archiver
        if compiler is None or archiver is None:
            raise ConfigureError("a compiler and an archiver are required")
        self.compiler = compiler
        self.archiver = archiver
        self.libraries: Mapping[str, Library] = dict(libraries or {})
        self.jobs = jobs

    def library(self, name: str) -> Library:
        """Look up a known library by name.

        Raises:
            ConfigureError: If there is no such library.
        """
        try:
            return self.libraries[name]
        except KeyError:
            known = ", ".join(sorted(self.libraries)) or "none"
            raise ConfigureError(
                f"unknown library: {name} (known: {known})"
            ) from None

    def load(
        self, library: Library | str, config: BuildConfig, tmpdir: Path | str
    ) -> Path:
        """Return the archive of a library, building it if needed.

        Args:
            library: The library, or the name of a known library.
            config: Target configuration.
            tmpdir: Scratch directory for object files. The caller removes
                it after this call.

        Returns:
            Path to the archive, or to the precompiled library.

        Raises:
            JobError: If a build step failed.
            OSError: On filesystem errors while checking the cache.
        """
        if isinstance(library, str):
            library = self.library(library)

        path, precompiled = config.library_path(library.name)
        if precompiled:
            logger.info("Using precompiled %s: %s", library.name, path)
            return path

        root, result, out_dir = self._plan(library, config, Path(tmpdir))
        if out_dir is None:
            return result

        logger.info("Building %s for %s", library.name, config.target_name)
        try:
            Scheduler(self.jobs).run(root)
        except BaseException:
            shutil.rmtree(out_dir, ignore_errors=True)
            raise
        return result

    def plan(
        self, library: Library | str, config: BuildConfig, tmpdir: Path | str
    ) -> JobNode:
        """Create the job graph for a library without running it.

        Returns:
            The archive job, or a pass-through job if the library is
            precompiled or cached. Its result is the archive path.
        """
        if isinstance(library, str):
            library = self.library(library)
        return self._plan(library, config, Path(tmpdir))[0]

    def _plan(
        self, library: Library, config: BuildConfig, tmpdir: Path
    ) -> tuple[JobNode, Path, Path | None]:
        """Create the job graph.

        Returns:
            The root job, the path of its result and the temporary output
            dir (None when nothing needs to be built).
        """
        path, precompiled = config.library_path(library.name)
        if precompiled:
            return passthrough(path, f"precompiled {library.name}"), path, None

        target = config.triple
        outname = path.name
        cache = ArtifactCache(config.cache_dir)
        sources = library.source_paths(target)
        cached = cache.load(outname, sources)
        if cached is not None:
            archive = cached / ARCHIVE_NAME
            return passthrough(archive, f"cached {outname}"), archive, None

        # The library is assembled in a temporary directory inside the
        # cache and renamed into place when complete.
        out_dir = cache.make_temp_dir(outname)
        try:
            root = self._jobs(library, config, cache, outname, sources, out_dir, tmpdir)
        except BaseException:
            shutil.rmtree(out_dir, ignore_errors=True)
            raise
        return root, cache.path(outname) / ARCHIVE_NAME, out_dir

    def _jobs(
        self,
        library: Library,
        config: BuildConfig,
        cache: ArtifactCache,
        outname: str,
        sources: list[Path],
        out_dir: Path,
        tmpdir: Path,
    ) -> JobNode:
        target = config.triple
        build_dir = tmpdir / f"build-lib-{library.name}"
        build_dir.mkdir()

        args = library_flags(
            library.cflags(target, out_dir),
            target,
            cpu=config.cpu,
            build_dir=build_dir,
            name=library.name,
        )
        logger.debug("Flags for %s: %s", library.name, " ".join(args))

        # Headers must exist before anything that may include them is compiled.
        header_jobs: list[JobNode] = []
        if library.has_headers:
            include_dir = out_dir / INCLUDE_DIR

            def make_headers() -> None:
                include_dir.mkdir()
                library.make_headers(target, include_dir)

            header_jobs.append(
                JobNode(f"headers {library.name}/{INCLUDE_DIR}", action=make_headers)
            )

        objects: list[Path] = []
        compile_jobs: list[JobNode] = []
        for source in library.sources(target):
            srcpath = library.source_dir / source
            objpath = build_dir / object_name(source)
            objects.append(objpath)
            compile_jobs.append(self._compile_job(args, srcpath, objpath, header_jobs))

        # The startup object is not part of the archive. It is a dependency
        # of the archive job only so that it gets built.
        if library.crt1_source is not None:
            srcpath = library.source_dir / library.crt1_source
            objpath = out_dir / CRT1_NAME
            compile_jobs.insert(
                0, self._compile_job(args, srcpath, objpath, header_jobs)
            )

        archiver = self.archiver

        def make_archive() -> None:
            try:
                archiver.archive(out_dir / ARCHIVE_NAME, objects)
            except ToolError as e:
                raise RtlibError(f"failed to make archive for {target}: {e}") from e
            cache.store(out_dir, outname, sources)

        root = JobNode(
            f"ar {library.name}/{ARCHIVE_NAME}",
            result=cache.path(outname) / ARCHIVE_NAME,
            dependencies=compile_jobs,
            action=make_archive,
        )
        return root

    def _compile_job(
        self,
        args: Sequence[str],
        srcpath: Path,
        objpath: Path,
        dependencies: list[JobNode],
    ) -> JobNode:
        compiler = self.compiler
        command = [*args, "-o", str(objpath), str(srcpath)]

        def compile_source() -> None:
            try:
                compiler.compile(command)
            except ToolError as e:
                raise CommandError("failed to build", srcpath, e) from e

        return JobNode(
            f"compile {srcpath}",
            result=objpath,
            dependencies=dependencies,
            action=compile_source,
        )

    def __repr__(self) -> str:
        names = ", ".join(self.libraries)
        return f"{self.__class__.__name__}(libraries=[{names}])"
