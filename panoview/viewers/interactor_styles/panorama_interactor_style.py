from vtkmodules.vtkInteractionStyle import vtkInteractorStyleTrackballCamera

# Pinch scale change per zoom level.
PINCH_STEP = 1.25


class PanoramaInteractorStyle(vtkInteractorStyleTrackballCamera):
    """
    Forwards mouse and touch input to a PanoramaViewer instead of moving the VTK camera.

    The viewer owns the camera; every default trackball handler is replaced.
    """
    def __init__(self, parent=None):
        super().__init__()
        self.parent = parent
        self._dragging = False
        self._pinch_reference = 1.0

        for event, handler in (
                ("LeftButtonPressEvent", self.on_left_button_down),
                ("LeftButtonReleaseEvent", self.on_left_button_up),
                ("MouseMoveEvent", self.on_mouse_move),
                ("RightButtonPressEvent", self.on_right_button_down),
                ("RightButtonReleaseEvent", self._ignore),
                ("MiddleButtonPressEvent", self._ignore),
                ("MiddleButtonReleaseEvent", self._ignore),
                ("MouseWheelForwardEvent", self.on_mouse_wheel_forward),
                ("MouseWheelBackwardEvent", self.on_mouse_wheel_backward),
                ("StartPinchEvent", self.on_start_pinch),
                ("PinchEvent", self.on_pinch),
                ("EndPinchEvent", self._ignore),
                ("CharEvent", self._ignore),
        ):
            self.RemoveObservers(event)
            self.AddObserver(event, handler)

    def on_left_button_down(self, obj, event):
        x, y = self.GetInteractor().GetEventPosition()
        self._dragging = True
        self.parent.pointer_pressed(x, y)

    def on_mouse_move(self, obj, event):
        x, y = self.GetInteractor().GetEventPosition()
        self.parent.pointer_moved(x, y)

    def on_left_button_up(self, obj, event):
        if self._dragging:
            self._dragging = False
            self.parent.pointer_released()

    def on_right_button_down(self, obj, event):
        x, y = self.GetInteractor().GetEventPosition()
        self.parent.pick(x, y)

    def on_mouse_wheel_forward(self, obj, event):
        self.parent.zoom_in()

    def on_mouse_wheel_backward(self, obj, event):
        self.parent.zoom_out()

    def on_start_pinch(self, obj, event):
        self._pinch_reference = self.GetInteractor().GetScale()

    def on_pinch(self, obj, event):
        """Zoom one level each time the fingers spread or close by PINCH_STEP."""
        scale = self.GetInteractor().GetScale()
        if scale <= 0 or self._pinch_reference <= 0:
            return
        while scale / self._pinch_reference >= PINCH_STEP:
            self._pinch_reference *= PINCH_STEP
            self.parent.zoom_in()
        while scale / self._pinch_reference <= 1 / PINCH_STEP:
            self._pinch_reference /= PINCH_STEP
            self.parent.zoom_out()

    def _ignore(self, obj, event):
        return
