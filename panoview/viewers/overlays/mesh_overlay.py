from __future__ import annotations

import logging

import vtk

from panoview.utils import vtk_helpers

logger = logging.getLogger(__name__)


class MeshOverlay:
    """
    Mesh view of the panorama sphere.

    Shows the sphere as a wireframe together with a cross at the viewport
    center; both are switched together.
    """

    def __init__(self, sphere_actor: vtk.vtkActor, cross_actor: vtk.vtkActor2D | None = None) -> None:
        self.sphere_actor = sphere_actor
        self.cross_actor = cross_actor if cross_actor is not None else vtk_helpers.make_center_cross()
        self._visible = False
        self._apply()

    @property
    def visible(self) -> bool:
        return self._visible

    def set_visible(self, visible: bool) -> bool:
        """
        Show or hide the mesh.

        :return: True if the visibility changed
        """
        visible = bool(visible)
        if visible == self._visible:
            return False
        self._visible = visible
        self._apply()
        logger.debug("Mesh view %s.", "on" if visible else "off")
        return True

    def _apply(self) -> None:
        prop = self.sphere_actor.GetProperty()
        if self._visible:
            prop.SetRepresentationToWireframe()
        else:
            prop.SetRepresentationToSurface()
        self.cross_actor.SetVisibility(self._visible)
