"""Runtime library build pipeline.

Catalog -> resolver -> flag synthesizer -> sub-build dispatcher -> registry,
run once per library per call. The pipeline is generic; everything library
specific lives in a ``LibraryDescriptor``.
"""

from cxxforge.core.errors import (
    ArtifactAlreadyRegisteredError,
    UnsupportedBuildConfigurationError,
)
from cxxforge.core.structlog_logger import StructlogMixin
from cxxforge.runtime.dispatcher import SubBuildDispatcher
from cxxforge.runtime.flags import FlagSynthesizer, create_flag_synthesizer
from cxxforge.runtime.library import (
    LIBCXX,
    LIBCXXABI,
    LibraryDescriptor,
    LibraryKind,
    get_library,
)
from cxxforge.runtime.models.units import CompileUnit
from cxxforge.runtime.protocols import CompilationEngineProtocol
from cxxforge.runtime.registry import Registration
from cxxforge.runtime.resolver import SourceSetResolver, create_source_set_resolver
from cxxforge.runtime.session import BuildSession


class RuntimeLibraryBuilder(StructlogMixin):
    """Build one runtime support library into the session's registry."""

    service_name = "runtime_library_builder"

    def __init__(
        self,
        engine: CompilationEngineProtocol,
        resolver: SourceSetResolver | None = None,
        synthesizer: FlagSynthesizer | None = None,
        dispatcher: SubBuildDispatcher | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            engine: Compilation engine running the sub-builds
            resolver: Source-set resolver
            synthesizer: Flag synthesizer
            dispatcher: Sub-build dispatcher (defaults to one wrapping engine)
        """
        super().__init__()
        self.engine = engine
        self.resolver = resolver or create_source_set_resolver()
        self.synthesizer = synthesizer or create_flag_synthesizer()
        self.dispatcher = dispatcher or SubBuildDispatcher(engine)

    def check_capability(self) -> None:
        """Fail fast when the engine cannot compile C++.

        Raises:
            UnsupportedBuildConfigurationError: If the LLVM backend is missing
        """
        if not self.engine.has_llvm():
            raise UnsupportedBuildConfigurationError(
                "Compilation engine was built without LLVM extensions; "
                "cannot build C++ runtime libraries"
            )

    def compile_units(
        self, session: BuildSession, library: LibraryDescriptor
    ) -> list[CompileUnit]:
        """Resolve and synthesize the compile units of a library for session."""
        resolved = self.resolver.resolve(library, session.target)
        return self.synthesizer.synthesize(
            resolved, session.abi_version, session.lib_directory
        )

    def build(
        self, session: BuildSession, library: LibraryDescriptor | LibraryKind | str
    ) -> Registration:
        """Build a runtime library and register the artifact with the session.

        Args:
            session: Parent build session
            library: Library descriptor, kind or name ("c++", "c++abi")

        Returns:
            Registration: The slot now holding the built artifact

        Raises:
            UnsupportedBuildConfigurationError: Before any work, if the engine
                has no LLVM backend
            SubBuildError: If the delegated compilation fails
            ArtifactAlreadyRegisteredError: Before any work, if the library was
                already built in this session
        """
        self.check_capability()

        if not isinstance(library, LibraryDescriptor):
            library = get_library(library)
        if session.registry.is_registered(library.kind):
            raise ArtifactAlreadyRegisteredError(library.kind.value)

        log = self.logger.bind(library=library.root_name, target=session.target.triple)
        units = self.compile_units(session, library)
        log.debug("compile_units_resolved", count=len(units))

        request = self.dispatcher.create_request(library, session, units)
        artifact = self.dispatcher.dispatch(request)
        try:
            registration = session.registry.register(library.kind, artifact)
        except ArtifactAlreadyRegisteredError:
            artifact.release()
            raise
        log.info("runtime_library_registered", path=str(artifact.full_object_path))
        return registration


def create_runtime_library_builder(
    engine: CompilationEngineProtocol,
) -> RuntimeLibraryBuilder:
    """Create a runtime library builder around engine."""
    return RuntimeLibraryBuilder(engine)


def build_libcxx(
    session: BuildSession, engine: CompilationEngineProtocol
) -> Registration:
    """Build libc++ for the session's target."""
    return create_runtime_library_builder(engine).build(session, LIBCXX)


def build_libcxxabi(
    session: BuildSession, engine: CompilationEngineProtocol
) -> Registration:
    """Build libc++abi for the session's target."""
    return create_runtime_library_builder(engine).build(session, LIBCXXABI)


def resolve_compile_units(
    session: BuildSession, library: LibraryDescriptor | LibraryKind | str
) -> list[CompileUnit]:
    """Resolve compile units without touching any compilation engine."""
    if not isinstance(library, LibraryDescriptor):
        library = get_library(library)
    resolved = create_source_set_resolver().resolve(library, session.target)
    return create_flag_synthesizer().synthesize(
        resolved, session.abi_version, session.lib_directory
    )
