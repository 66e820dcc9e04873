"""
PIL IO module.

Decoding of uploads and encoding of the export raster. Export sinks receive
the encoded bytes and a suggested file name.
"""
import io
import logging
import os
from typing import BinaryIO, Protocol, Union

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)


class SaveSink(Protocol):
    """Receives the exported raster."""

    def save(self, data: bytes, filename: str) -> None: ...


class FileSink(object):
    """
    Write exports into ``directory``.

    .. py:attribute:: last_path

        Path of the most recent export, or `None`.
    """

    def __init__(self, directory: Union[str, os.PathLike] = '.'):
        self.directory = os.fspath(directory)
        self.last_path = None

    def save(self, data: bytes, filename: str) -> None:
        path = os.path.join(self.directory, os.path.basename(filename))
        with open(path, 'wb') as f:
            f.write(data)
        logger.debug('Saved %d bytes to %s' % (len(data), path))
        self.last_path = path


def open_image(fp: Union[str, os.PathLike, BinaryIO]) -> Image.Image:
    """
    Decode an uploaded image.

    EXIF orientation is applied and embedded ICC profiles are converted to
    sRGB so the natural size and colors match what a browser displays.

    :return: RGBA `PIL.Image`.
    """
    with Image.open(fp) as image:
        image.load()
        icc_profile = image.info.get('icc_profile')
        image = ImageOps.exif_transpose(image)
        if image.mode not in ('RGB', 'RGBA'):
            image = image.convert('RGBA')
        if icc_profile:
            image = _apply_icc(image, icc_profile)
        return image.convert('RGBA')


def encode_png(image: Image.Image) -> bytes:
    """Encode ``image`` losslessly."""
    with io.BytesIO() as f:
        image.save(f, format='PNG')
        return f.getvalue()


def _apply_icc(image, icc_profile):
    """Apply ICC Color profile."""
    try:
        from PIL import ImageCms
    except ImportError:
        logger.debug(
            'ICC profile found but not supported. Install little-cms.'
        )
        return image

    alpha = None
    if image.mode == 'RGBA':
        alpha = image.getchannel('A')
        image = image.convert('RGB')

    try:
        in_profile = ImageCms.ImageCmsProfile(io.BytesIO(icc_profile))
        out_profile = ImageCms.createProfile('sRGB')
        image = ImageCms.profileToProfile(image, in_profile, out_profile)
    except ImageCms.PyCMSError as e:
        logger.warning('PyCMSError: %s' % (e))

    if alpha is not None:
        image = image.convert('RGBA')
        image.putalpha(alpha)
    return image
