from __future__ import annotations

import numpy as np
import vtk
from PySide6 import QtWidgets

IMAGE_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.tif *.tiff)"


def load_image(path: str) -> vtk.vtkImageData:
    """
    Load an image file with whichever VTK reader can handle it.

    :raises ValueError: if no reader recognises the file
    """
    factory = vtk.vtkImageReader2Factory()
    reader = factory.CreateImageReader2(str(path))
    if reader is None:
        raise ValueError(f"Unsupported image file: {path}")
    reader.SetFileName(str(path))
    reader.Update()
    return reader.GetOutput()


def select_image_file() -> str | None:
    """Select an equirectangular image file."""
    path, _ = QtWidgets.QFileDialog.getOpenFileName(None, "Open panorama", "", IMAGE_FILE_FILTER)
    return path or None


def make_sphere_actor(image: vtk.vtkImageData | None = None,
                      circles: int = 16,
                      points: int = 60) -> tuple[vtk.vtkActor, vtk.vtkTexture]:
    """
    Unit sphere textured with an equirectangular image, meant to be seen from inside.

    :param image: Texture image; the texture stays empty if None
    :param circles: Number of latitude subdivisions
    :param points: Number of longitude subdivisions
    :return: The actor and its texture (to swap images later)
    """
    source = vtk.vtkTexturedSphereSource()
    source.SetRadius(1.0)
    source.SetPhiResolution(circles)
    source.SetThetaResolution(points)

    # Seen from inside the sphere, longitude grows to the left; flip it back.
    flip = vtk.vtkTransformTextureCoords()
    flip.SetInputConnection(source.GetOutputPort())
    flip.FlipSOn()

    mapper = vtk.vtkPolyDataMapper()
    mapper.SetInputConnection(flip.GetOutputPort())

    texture = vtk.vtkTexture()
    texture.InterpolateOn()
    if image is not None:
        texture.SetInputData(image)

    actor = vtk.vtkActor()
    actor.SetMapper(mapper)
    actor.SetTexture(texture)
    actor.GetProperty().LightingOff()
    return actor, texture


def numpy_to_vtk_matrix(array: np.ndarray) -> vtk.vtkMatrix4x4:
    """Copy a 4x4 numpy array into a vtkMatrix4x4."""
    if array.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {array.shape}")
    matrix = vtk.vtkMatrix4x4()
    matrix.DeepCopy(array.ravel().tolist())
    return matrix


def make_center_cross(half_size: int = 12) -> vtk.vtkActor2D:
    """
    Hidden 2D cross marking the center of the viewport.

    :param half_size: Arm length in pixels
    """
    points = vtk.vtkPoints()
    lines = vtk.vtkCellArray()
    for (x0, y0), (x1, y1) in (((-half_size, 0), (half_size, 0)),
                               ((0, -half_size), (0, half_size))):
        start = points.InsertNextPoint(x0, y0, 0.0)
        end = points.InsertNextPoint(x1, y1, 0.0)
        lines.InsertNextCell(2, [start, end])

    cross = vtk.vtkPolyData()
    cross.SetPoints(points)
    cross.SetLines(lines)

    mapper = vtk.vtkPolyDataMapper2D()
    mapper.SetInputData(cross)

    actor = vtk.vtkActor2D()
    actor.SetMapper(mapper)
    # Points are pixel offsets from the actor position.
    actor.GetPositionCoordinate().SetCoordinateSystemToNormalizedViewport()
    actor.SetPosition(0.5, 0.5)
    actor.GetProperty().SetColor(1.0, 1.0, 1.0)
    actor.GetProperty().SetLineWidth(2.0)
    actor.VisibilityOff()
    return actor
