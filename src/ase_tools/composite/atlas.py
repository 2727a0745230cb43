"""
Sprite atlas packing.

Frames are packed into one image, left to right. By default every frame goes
to a single row; ``columns`` wraps the frames into a grid. Placement
rectangles use the bottom-up convention of
:py:class:`~ase_tools.api.buffer.ImageBuffer`: ``y`` is measured from the
bottom edge of the atlas, so the first row sits at
``y = atlas_height - frame_height``.
"""

import logging
from typing import Optional

from attrs import define, field
from PIL import Image

from ase_tools.api.buffer import ImageBuffer
from ase_tools.ase.document import AsepriteDocument
from ase_tools.composite.composite import composite_frames

logger = logging.getLogger(__name__)


@define(frozen=True)
class Rect(object):
    """Placement of one frame in the atlas."""

    x: int
    y: int
    width: int
    height: int


@define(frozen=True)
class Atlas(object):
    """
    Packed frames.

    .. py:attribute:: image

        :py:class:`~ase_tools.api.buffer.ImageBuffer` holding every frame.

    .. py:attribute:: rects

        One :py:class:`Rect` per frame, in frame order.

    .. py:attribute:: failures

        Frames that failed to composite, by index; their rectangles are left
        transparent.
    """

    image: ImageBuffer
    rects: list = field(factory=list)
    failures: dict = field(factory=dict)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def topil(self) -> Optional[Image.Image]:
        """Atlas as a PIL Image, or None for an empty document."""
        if self.width == 0 or self.height == 0:
            return None
        return self.image.topil()

    def crop(self, index: int) -> Image.Image:
        """Cut the frame at ``index`` out of the atlas as a PIL Image."""
        rect = self.rects[index]
        top = self.height - rect.y - rect.height
        return self.image.topil().crop(
            (rect.x, top, rect.x + rect.width, top + rect.height)
        )


def layout(
    count: int, frame_width: int, frame_height: int, columns: Optional[int] = None
) -> tuple[int, int, list[Rect]]:
    """
    Compute the atlas size and the placement rectangles.

    :param count: number of frames.
    :param columns: frames per row, all frames in one row when omitted.
    :return: ``(atlas_width, atlas_height, rects)``.
    """
    if count == 0:
        return 0, 0, []
    if columns is None:
        columns = count
    if columns < 1:
        raise ValueError("columns must be positive: %r" % columns)
    columns = min(columns, count)
    rows = (count + columns - 1) // columns
    atlas_width = frame_width * columns
    atlas_height = frame_height * rows
    rects = []
    for index in range(count):
        row, column = divmod(index, columns)
        rects.append(
            Rect(
                column * frame_width,
                atlas_height - (row + 1) * frame_height,
                frame_width,
                frame_height,
            )
        )
    return atlas_width, atlas_height, rects


def build_atlas(
    document: AsepriteDocument,
    columns: Optional[int] = None,
    workers: Optional[int] = None,
    **kwargs,
) -> Atlas:
    """
    Composite every frame and pack the results into one image.

    Frames are composited in parallel; copying into the atlas starts once all
    of them are done, each into its own rectangle.

    :param document: decoded document.
    :param columns: frames per row, a single row when omitted.
    :param workers: maximum number of worker threads.
    :param kwargs: compositing options, see
        :py:func:`~ase_tools.composite.composite.composite_frames`.
    :return: :py:class:`Atlas`.
    """
    width, height = document.header.width, document.header.height
    atlas_width, atlas_height, rects = layout(
        len(document.frames), width, height, columns
    )
    batch = composite_frames(document, workers=workers, **kwargs)
    image = ImageBuffer.new(atlas_width, atlas_height)
    for rect, frame in zip(rects, batch.images):
        if frame is None:
            continue
        image.set_pixel_block(rect.x, rect.y, rect.width, rect.height, frame.data)
    logger.debug("Packed %d frames into %dx%d" % (len(rects), atlas_width, atlas_height))
    return Atlas(image, rects, batch.failures)
