import asyncio

from src.api.errors import ErrorCode
from src.api.templates.registry import TemplateRegistry
from src.api.templates.resolver import TemplateResolver
from src.api.templates.types import ResolverStatus
from tests.helpers.fake_templates import BrokenLoader, CountingLoader, GatedLoader, StubTemplate
from tests.helpers.menu_fixtures import acme_business


def test_initial_state_is_idle():
    r = TemplateResolver(TemplateRegistry())
    assert r.state.status == ResolverStatus.IDLE
    st = asyncio.run(r.activate(None))
    assert st.status == ResolverStatus.IDLE


def test_theme_match_is_case_insensitive():
    kardi = CountingLoader(StubTemplate("kardi"))
    r = TemplateResolver(TemplateRegistry({"kardi": kardi}))
    st = asyncio.run(r.activate(acme_business(theme="Kardi")))
    assert st.status == ResolverStatus.ACTIVE
    assert st.unit.name == "kardi"
    assert st.theme_id == "kardi"
    assert kardi.calls == 1


def test_unknown_theme_is_unresolved_and_loads_nothing():
    kardi = CountingLoader(StubTemplate("kardi"))
    r = TemplateResolver(TemplateRegistry({"kardi": kardi}))
    st = asyncio.run(r.activate(acme_business(theme="unknown-theme")))
    assert st.status == ResolverStatus.UNRESOLVED
    assert st.error == ErrorCode.UNKNOWN_THEME
    assert st.unit is None
    assert kardi.calls == 0


def test_missing_theme_is_unresolved():
    r = TemplateResolver(TemplateRegistry())
    st = asyncio.run(r.activate(acme_business(theme="")))
    assert st.status == ResolverStatus.UNRESOLVED


def test_loader_failure_is_failed_not_unresolved():
    broken = BrokenLoader(RuntimeError("chunk load error"))
    r = TemplateResolver(TemplateRegistry({"kardi": broken}))
    st = asyncio.run(r.activate(acme_business()))
    assert st.status == ResolverStatus.FAILED
    assert st.error == ErrorCode.TEMPLATE_LOAD_FAILED
    assert "chunk load error" in st.detail


def test_last_request_wins_when_first_completes_last():
    a = GatedLoader(StubTemplate("a"))
    b = GatedLoader(StubTemplate("b"))
    r = TemplateResolver(TemplateRegistry({"a": a, "b": b}))

    async def run():
        ta = asyncio.create_task(r.activate(acme_business(theme="A")))
        await asyncio.sleep(0)
        tb = asyncio.create_task(r.activate(acme_business(theme="B")))
        await asyncio.sleep(0)
        assert r.state.status == ResolverStatus.RESOLVING
        assert r.state.theme_id == "b"

        b.release()
        await tb
        assert r.state.unit.name == "b"

        a.release()
        await ta
        return r.state

    st = asyncio.run(run())
    assert st.status == ResolverStatus.ACTIVE
    assert st.unit.name == "b"
    assert a.calls == 1 and b.calls == 1


def test_stale_failure_does_not_clobber_newer_activation():
    a = GatedLoader(StubTemplate("a"))
    b = CountingLoader(StubTemplate("b"))
    r = TemplateResolver(TemplateRegistry({"a": a, "b": b}))

    async def run():
        ta = asyncio.create_task(r.activate(acme_business(theme="a")))
        await asyncio.sleep(0)
        await r.activate(acme_business(theme="b"))
        a.fail(RuntimeError("late"))
        await ta
        return r.state

    st = asyncio.run(run())
    assert st.status == ResolverStatus.ACTIVE
    assert st.unit.name == "b"


def test_business_going_away_makes_pending_load_stale():
    a = GatedLoader(StubTemplate("a"))
    r = TemplateResolver(TemplateRegistry({"a": a}))

    async def run():
        ta = asyncio.create_task(r.activate(acme_business(theme="a")))
        await asyncio.sleep(0)
        await r.activate(None)
        a.release()
        await ta
        return r.state

    assert asyncio.run(run()).status == ResolverStatus.IDLE


def test_same_theme_does_not_reload():
    kardi = CountingLoader(StubTemplate("kardi"))
    r = TemplateResolver(TemplateRegistry({"kardi": kardi}))

    async def run():
        await r.activate(acme_business(theme="kardi"))
        return await r.activate(acme_business(theme="KARDI", name="Renamed"))

    st = asyncio.run(run())
    assert st.status == ResolverStatus.ACTIVE
    assert kardi.calls == 1


def test_theme_change_swaps_unit():
    r = TemplateResolver(TemplateRegistry({
        "kardi": CountingLoader(StubTemplate("kardi")),
        "grid": CountingLoader(StubTemplate("grid")),
    }))
    seen = []
    r.subscribe(lambda st: seen.append((st.status.value, getattr(st.unit, "name", None))))

    async def run():
        await r.activate(acme_business(theme="kardi"))
        await r.activate(acme_business(theme="grid"))

    asyncio.run(run())
    assert seen == [
        ("resolving", None),
        ("active", "kardi"),
        ("resolving", None),
        ("active", "grid"),
    ]


def test_fail_forces_pending_resolution_to_failed():
    slow = GatedLoader(StubTemplate("slow"))
    r = TemplateResolver(TemplateRegistry({"slow": slow}))

    async def run():
        t = asyncio.create_task(r.activate(acme_business(theme="slow")))
        await asyncio.sleep(0)
        forced = r.fail("timeout")
        slow.release()
        await t
        return forced, r.state

    forced, final = asyncio.run(run())
    assert forced.status == ResolverStatus.FAILED
    assert forced.detail == "timeout"
    assert final.status == ResolverStatus.FAILED


def test_fail_is_noop_outside_resolving():
    r = TemplateResolver(TemplateRegistry())
    assert r.fail().status == ResolverStatus.IDLE


def test_retry_after_failure():
    flaky = BrokenLoader(RuntimeError("offline"))
    reg = TemplateRegistry({"kardi": flaky})
    r = TemplateResolver(reg)

    async def run():
        first = await r.activate(acme_business())
        reg.register("kardi", CountingLoader(StubTemplate("kardi")))
        second = await r.retry()
        return first, second

    first, second = asyncio.run(run())
    assert first.status == ResolverStatus.FAILED
    assert second.status == ResolverStatus.ACTIVE
    assert second.unit.name == "kardi"


def test_retry_reset_reaches_subscribers():
    r = TemplateResolver(TemplateRegistry())
    seen = []
    r.subscribe(lambda st: seen.append(st.status))

    async def run():
        await r.activate(acme_business(theme="nope"))
        return await r.retry()

    final = asyncio.run(run())
    assert final.status == ResolverStatus.UNRESOLVED
    assert seen == [ResolverStatus.UNRESOLVED, ResolverStatus.IDLE, ResolverStatus.UNRESOLVED]
