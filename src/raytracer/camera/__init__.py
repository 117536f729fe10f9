"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera, viewport geometry and primary ray
        generation

Pixel (column, row) maps to a ray through the center of the pixel's cell on
an image plane at distance 1 / tan(fov / 2), rotated into world space by the
camera's (right, up, forward) basis. Row 0 is the top of the image.

pinhole holds Taichi fields and is not imported here; import it directly
after ``ti.init``.
"""
