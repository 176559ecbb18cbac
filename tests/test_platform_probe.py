import pytest

from uup2iso import platform_probe
from uup2iso.exceptions import UnsupportedPlatformError
from uup2iso.platform_probe import OSFamily, PlatformInfo, detect_os_family, detect_platform


@pytest.mark.parametrize(
    ("platform_id", "family"),
    [
        ("darwin", OSFamily.MACOS),
        ("linux", OSFamily.LINUX),
        ("win32", OSFamily.WINDOWS),
        ("freebsd13", OSFamily.FREEBSD),
        ("freebsd14", OSFamily.FREEBSD),
    ],
)
def test_known_platforms(platform_id: str, family: OSFamily) -> None:
    assert detect_os_family(platform_id) is family
    assert detect_os_family(platform_id) is family


@pytest.mark.parametrize("platform_id", ["sunos5", "aix", "emscripten", ""])
def test_unknown_platform_fails(platform_id: str) -> None:
    with pytest.raises(UnsupportedPlatformError, match="Cannot determine operating system"):
        detect_os_family(platform_id)

    with pytest.raises(UnsupportedPlatformError):
        detect_platform(platform_id)


@pytest.mark.parametrize("platform_id", ["darwin", "linux", "freebsd13"])
def test_never_elevated_outside_windows(
    platform_id: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fail() -> bool:
        raise AssertionError("Windows admin check must not run on this platform")

    monkeypatch.setattr(platform_probe, "_windows_is_admin", fail)

    info = detect_platform(platform_id)
    assert info.is_elevated is False


@pytest.mark.parametrize("admin", [True, False])
def test_windows_uses_admin_check(admin: bool, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(platform_probe, "_windows_is_admin", lambda: admin)

    assert detect_platform("win32") == PlatformInfo(
        family=OSFamily.WINDOWS, is_elevated=admin
    )


def test_admin_query_failure_is_not_elevated(monkeypatch: pytest.MonkeyPatch) -> None:
    # ctypes.windll does not exist off Windows, which the probe treats as not admin.
    monkeypatch.delattr(platform_probe.ctypes, "windll", raising=False)

    assert platform_probe._windows_is_admin() is False
