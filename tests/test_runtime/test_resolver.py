"""Tests for the rule-table driven source-set resolver."""

from collections.abc import Callable

import pytest

from cxxforge.runtime.catalog import LIBCXX_CATALOG, LIBCXXABI_CATALOG
from cxxforge.runtime.library import LIBCXX, LIBCXXABI
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.resolver import SourceSetResolver, create_source_set_resolver
from cxxforge.runtime.rules import AddFlags, Exclude, FlagPlacement, Rule


FILESYSTEM_SOURCES = [s for s in LIBCXX_CATALOG if s.startswith("src/filesystem/")]
WIN32_THREAD_SOURCE = "src/support/win32/thread_win32.cpp"
THREAD_ATEXIT_SOURCE = "src/cxa_thread_atexit.cpp"
EXCEPTION_SOURCES = ["src/cxa_exception.cpp", "src/cxa_personality.cpp"]


@pytest.fixture
def resolver() -> SourceSetResolver:
    return create_source_set_resolver()


class TestLibcxxResolution:
    """Tests for libc++ catalog resolution."""

    def test_linux_keeps_filesystem_and_drops_platform_support(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        resolved = resolver.resolve(LIBCXX, make_target("x86_64-linux-gnu"))

        assert all(source in resolved.sources for source in FILESYSTEM_SOURCES)
        assert not any("src/support/" in source for source in resolved.sources)
        assert resolved.excluded["src/support/win32/support.cpp"] == "win32-support"
        assert resolved.excluded["src/support/ibm/xlocale_zos.cpp"] == "ibm-support"
        assert len(resolved) == len(LIBCXX_CATALOG) - 6

    @pytest.mark.parametrize("triple", ["wasm32-wasi-musl", "x86_64-windows-msvc"])
    def test_no_native_filesystem_excludes_filesystem_subtree(
        self,
        resolver: SourceSetResolver,
        make_target: Callable[..., TargetDescriptor],
        triple: str,
    ):
        resolved = resolver.resolve(LIBCXX, make_target(triple))

        assert not any(s.startswith("src/filesystem/") for s in resolved.sources)
        for source in FILESYSTEM_SOURCES:
            assert resolved.excluded[source] == "no-native-filesystem"

    @pytest.mark.parametrize(
        "triple", ["x86_64-windows-gnu", "aarch64-macos-none", "x86_64-freebsd-none"]
    )
    def test_other_targets_include_filesystem(
        self,
        resolver: SourceSetResolver,
        make_target: Callable[..., TargetDescriptor],
        triple: str,
    ):
        resolved = resolver.resolve(LIBCXX, make_target(triple))

        assert all(source in resolved.sources for source in FILESYSTEM_SOURCES)

    def test_windows_keeps_win32_support(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        resolved = resolver.resolve(LIBCXX, make_target("x86_64-windows-gnu"))

        assert WIN32_THREAD_SOURCE in resolved.sources
        assert "src/support/win32/locale_win32.cpp" in resolved.sources
        assert "src/support/ibm/mbsnrtowcs.cpp" not in resolved.sources

    def test_zos_keeps_ibm_support_and_disables_aligned_allocation(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        resolved = resolver.resolve(LIBCXX, make_target("s390x-zos-none"))

        assert "src/support/ibm/xlocale_zos.cpp" in resolved.sources
        for entry in resolved.entries:
            assert entry.target_flags == ("-fno-aligned-allocation",)

    def test_aligned_allocation_enabled_elsewhere(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        resolved = resolver.resolve(LIBCXX, make_target("x86_64-linux-gnu"))

        for entry in resolved.entries:
            assert entry.target_flags == ("-faligned-allocation",)
            assert entry.leading_flags == ()

    def test_resolution_preserves_catalog_order(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        resolved = resolver.resolve(LIBCXX, make_target("x86_64-linux-gnu"))
        catalog_order = [s for s in LIBCXX_CATALOG if s in resolved.sources]

        assert resolved.sources == catalog_order


class TestSingleThreaded:
    """Single-threaded targets drop thread support from both libraries."""

    def test_libcxx_drops_thread_support_on_windows(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        target = make_target("x86_64-windows-gnu", single_threaded=True)
        resolved = resolver.resolve(LIBCXX, target)

        assert WIN32_THREAD_SOURCE not in resolved.sources
        assert resolved.excluded[WIN32_THREAD_SOURCE] == "single-threaded"
        assert "src/support/win32/support.cpp" in resolved.sources

    @pytest.mark.parametrize(
        "triple", ["x86_64-linux-gnu", "x86_64-windows-gnu", "wasm32-wasi-musl"]
    )
    def test_no_threads_macro_on_every_libcxx_entry(
        self,
        resolver: SourceSetResolver,
        make_target: Callable[..., TargetDescriptor],
        triple: str,
    ):
        resolved = resolver.resolve(LIBCXX, make_target(triple, single_threaded=True))

        assert WIN32_THREAD_SOURCE not in resolved.sources
        assert resolved.entries
        for entry in resolved.entries:
            assert "-D_LIBCPP_HAS_NO_THREADS" in entry.leading_flags

    def test_libcxxabi_drops_thread_atexit(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        target = make_target("x86_64-linux-gnu", single_threaded=True)
        resolved = resolver.resolve(LIBCXXABI, target)

        assert THREAD_ATEXIT_SOURCE not in resolved.sources
        assert len(resolved) == len(LIBCXXABI_CATALOG) - 1
        for entry in resolved.entries:
            assert entry.leading_flags == (
                "-D_LIBCXXABI_HAS_NO_THREADS",
                "-D_LIBCPP_HAS_NO_THREADS",
            )

    def test_multi_threaded_gnu_has_thread_atexit_impl(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        resolved = resolver.resolve(LIBCXXABI, make_target("x86_64-linux-gnu"))

        assert THREAD_ATEXIT_SOURCE in resolved.sources
        assert len(resolved) == len(LIBCXXABI_CATALOG)
        for entry in resolved.entries:
            assert entry.leading_flags == ("-DHAVE___CXA_THREAD_ATEXIT_IMPL",)

    def test_multi_threaded_musl_has_no_extra_flags(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        resolved = resolver.resolve(LIBCXXABI, make_target("x86_64-linux-musl"))

        for entry in resolved.entries:
            assert entry.leading_flags == ()


class TestExceptionlessTargets:
    """WASI lacks exception handling support."""

    def test_libcxx_keeps_file_count_and_adds_no_exceptions(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        wasi = resolver.resolve(LIBCXX, make_target("wasm32-wasi-musl"))
        # Same predicates apart from exceptions: no filesystem, no native support
        expected = len(LIBCXX_CATALOG) - len(FILESYSTEM_SOURCES) - 6

        assert len(wasi) == expected
        assert not any(s in wasi.excluded for s in LIBCXX_CATALOG if "exception" in s)
        for entry in wasi.entries:
            assert entry.target_flags == ("-fno-exceptions", "-faligned-allocation")

    def test_libcxxabi_drops_exception_machinery(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        resolved = resolver.resolve(LIBCXXABI, make_target("wasm32-wasi-musl"))

        assert len(resolved) == len(LIBCXXABI_CATALOG) - 2
        for source in EXCEPTION_SOURCES:
            assert resolved.excluded[source] == "no-exceptions"
        for entry in resolved.entries:
            assert entry.leading_flags[0] == "-fno-exceptions"

    def test_first_matching_exclusion_wins(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        target = make_target("wasm32-wasi-musl", single_threaded=True)
        resolved = resolver.resolve(LIBCXXABI, target)

        assert resolved.excluded == {
            "src/cxa_exception.cpp": "no-exceptions",
            "src/cxa_personality.cpp": "no-exceptions",
            "src/cxa_thread_atexit.cpp": "single-threaded",
        }
        for entry in resolved.entries:
            assert entry.leading_flags == (
                "-fno-exceptions",
                "-D_LIBCXXABI_HAS_NO_THREADS",
                "-D_LIBCPP_HAS_NO_THREADS",
            )


class TestRuleTable:
    """Tests for rule primitives."""

    def test_exclude_matches_prefixes(self):
        effect = Exclude(("src/a/", "src/b.cpp"))

        assert effect.matches("src/a/x.cpp")
        assert effect.matches("src/b.cpp")
        assert not effect.matches("src/c.cpp")

    def test_active_rules_in_table_order(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        rules = resolver.active_rules(LIBCXX, make_target("x86_64-linux-gnu"))

        assert [rule.name for rule in rules] == [
            "win32-support",
            "solaris-support",
            "ibm-support",
            "aligned-allocation",
        ]

    def test_custom_rule_flags_placement(
        self, resolver: SourceSetResolver, make_target: Callable[..., TargetDescriptor]
    ):
        rules = [
            Rule(
                name="custom",
                condition=lambda target: True,
                effects=(
                    AddFlags(("-DA",)),
                    AddFlags(("-DB",), FlagPlacement.TARGET),
                ),
            )
        ]

        entry, excluded_by = resolver._apply_rules("src/x.cpp", rules)

        assert excluded_by is None
        assert entry.leading_flags == ("-DA",)
        assert entry.target_flags == ("-DB",)
