"""
High-level API: the :py:class:`~ase_tools.api.ase_image.AsepriteImage`
entry point, the layer tree and the pixel helpers it builds on.
"""
