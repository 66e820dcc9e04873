import asyncio
import io
import logging

import pytest
from PIL import Image

from textfx.api.geometry import Viewport
from textfx.api.session import BackgroundRemovalError, Session
from textfx.composite import CompositeError
from textfx.constants import BACKGROUND_REMOVAL_ERROR

from ..utils import StubFonts, cutout, gradient

logger = logging.getLogger(__name__)


class MemorySink(object):
    def __init__(self):
        self.saved = []

    def save(self, data, filename):
        self.saved.append((data, filename))


def make_remover(result):
    calls = []

    async def remover(image, progress=None):
        calls.append(image.size)
        if progress is not None:
            progress("fetch:model", 1, 1)
        await asyncio.sleep(0)
        if isinstance(result, Exception):
            raise result
        return result

    remover.calls = calls
    return remover


@pytest.fixture
def session():
    session = Session(fonts=StubFonts())
    session.store.set_attribute("text-layer-1", "text", "")
    return session


def test_upload(session):
    assert session.generation == 0
    generation = session.upload(gradient())
    assert generation == 1
    assert session.background.size == (64, 48)
    assert session.cutout is None
    assert session.loading
    assert session.error is None


def test_upload_file_object(session):
    f = io.BytesIO()
    gradient((20, 10)).convert("RGB").save(f, format="PNG")
    f.seek(0)
    session.upload(f)
    assert session.background.mode == "RGBA"
    assert session.background.size == (20, 10)


def test_upload_restores_image_layers():
    session = Session(fonts=StubFonts())
    session.store.remove("subject-layer")
    session.upload(gradient())
    assert session.store.subject() is not None


def test_remove_background(session):
    session.upload(gradient())
    progress = []
    remover = make_remover(cutout())
    assert asyncio.run(
        session.remove_background(
            remover, progress=lambda *args: progress.append(args)
        )
    )
    assert remover.calls == [(64, 48)]
    assert progress == [("fetch:model", 1, 1)]
    assert session.cutout.size == (64, 48)
    assert not session.loading


def test_remove_background_without_upload(session):
    with pytest.raises(ValueError):
        asyncio.run(session.remove_background(make_remover(cutout())))


def test_remove_background_failure(session):
    session.upload(gradient())
    remover = make_remover(BackgroundRemovalError("no subject"))
    assert not asyncio.run(session.remove_background(remover))
    assert session.error == BACKGROUND_REMOVAL_ERROR
    assert session.cutout is None
    assert not session.loading

    # Background and text stay usable.
    image = session.render(Viewport(0, 0, 64, 48))
    assert image.size == (64, 48)


def test_stale_cutout_is_discarded(session):
    first = session.upload(gradient())
    second = session.upload(gradient((32, 24)))
    assert not session.resolve_cutout(first, cutout())
    assert session.cutout is None
    assert session.loading
    assert session.resolve_cutout(second, cutout((32, 24)))
    assert session.cutout.size == (32, 24)


def test_stale_failure_is_discarded(session):
    first = session.upload(gradient())
    session.upload(gradient())
    assert not session.fail_cutout(first, RuntimeError("late"))
    assert session.error is None


def test_stale_async_result(session):
    session.upload(gradient())

    async def run():
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_remover(image, progress=None):
            started.set()
            await release.wait()
            return cutout()

        task = asyncio.ensure_future(session.remove_background(slow_remover))
        await started.wait()
        session.upload(gradient((32, 24)))
        release.set()
        return await task

    assert not asyncio.run(run())
    assert session.cutout is None
    assert session.generation == 2


def test_new_upload_clears_error(session):
    session.upload(gradient())
    session.fail_cutout(session.generation, "boom")
    assert session.error == BACKGROUND_REMOVAL_ERROR
    session.upload(gradient())
    assert session.error is None


def test_set_filter(session):
    state = session.set_filter("mono", 50, apply_to_full_image=False)
    assert state is session.filter
    assert state.settings.saturate == 0.5
    assert not state.apply_to_full_image
    with pytest.raises(ValueError):
        session.set_filter("sepia")


def test_export(session):
    session.upload(gradient())
    session.resolve_cutout(session.generation, cutout())
    sink = MemorySink()
    data = session.export(Viewport(0, 0, 32, 24), sink)
    assert sink.saved == [(data, "text-behind-image.png")]
    with Image.open(io.BytesIO(data)) as image:
        assert image.format == "PNG"
        assert image.size == (64, 48)


def test_export_failure_skips_sink(session):
    sink = MemorySink()
    with pytest.raises(CompositeError):
        session.export(Viewport(0, 0, 32, 24), sink)
    assert sink.saved == []
