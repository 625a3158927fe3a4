#!/usr/bin/env python3
"""
Polish Clock - an image-based analog watch face on the desktop
Features:
- Background and hand images, scaled to the window width
- Ticking second hand, aligned to wall-clock seconds
- Ambient mode (no second hand, no redraw timer), optional low-bit rendering
- Follows system time zone changes
"""

import gi
gi.require_version('Gtk', '3.0')
from gi.repository import Gtk, Gdk, GLib, Gio
import sys
import traceback

from face import Face
from renderer import ClockRenderer, ResourceLoadError
from scheduler import GLibTimer
from settings import Settings
from clock_time import TimeSource
from watch_face import WatchFace


LOCALTIME_PATH = '/etc/localtime'
TIME_TICK_SECONDS = 60


def show_error_dialog(title, details):
    """Show a dialog with copyable error details"""
    dialog = Gtk.MessageDialog(
        message_type=Gtk.MessageType.ERROR,
        buttons=Gtk.ButtonsType.CLOSE,
        text=title
    )

    scrolled = Gtk.ScrolledWindow()
    scrolled.set_policy(Gtk.PolicyType.AUTOMATIC, Gtk.PolicyType.AUTOMATIC)
    scrolled.set_min_content_height(200)
    scrolled.set_min_content_width(500)

    text_view = Gtk.TextView()
    text_view.set_editable(False)
    text_view.set_monospace(True)
    text_view.get_buffer().set_text(details)
    scrolled.add(text_view)

    content = dialog.get_content_area()
    content.pack_start(scrolled, True, True, 0)

    copy_button = Gtk.Button(label="Copy to Clipboard")
    def on_copy_clicked(button):
        clipboard = Gtk.Clipboard.get(Gdk.SELECTION_CLIPBOARD)
        clipboard.set_text(details, -1)
    copy_button.connect('clicked', on_copy_clicked)
    content.pack_start(copy_button, False, False, 0)

    dialog.show_all()
    dialog.run()
    dialog.destroy()

    print(details, file=sys.stderr)


def exception_hook(exc_type, exc_value, exc_traceback):
    """Global exception handler"""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    error_text = ''.join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    show_error_dialog("An error occurred", error_text)


class TimeZoneMonitor:
    """
    Watches /etc/localtime and reports time zone changes.
    Only runs between start() and stop(); both are idempotent.
    """

    def __init__(self, on_changed, path=LOCALTIME_PATH):
        self._on_changed = on_changed
        self._path = path
        self._monitor = None
        self._handler_id = None

    def start(self):
        if self._monitor is not None:
            return
        try:
            monitor = Gio.File.new_for_path(self._path).monitor_file(Gio.FileMonitorFlags.NONE, None)
        except GLib.Error as e:
            print(f"Warning: cannot watch {self._path} for time zone changes: {e.message}")
            return
        self._handler_id = monitor.connect('changed', self._on_file_changed)
        self._monitor = monitor

    def stop(self):
        if self._monitor is None:
            return
        monitor, self._monitor = self._monitor, None
        monitor.disconnect(self._handler_id)
        monitor.cancel()
        self._handler_id = None

    def _on_file_changed(self, monitor, file, other_file, event_type):
        if event_type in (Gio.FileMonitorEvent.CHANGES_DONE_HINT, Gio.FileMonitorEvent.CREATED,
                          Gio.FileMonitorEvent.DELETED):
            self._on_changed()


class PolishClock(Gtk.Window):
    def __init__(self, settings, renderer):
        super().__init__()

        self.settings = settings
        self._idle_ambient = False
        self._idle_source = None

        self.set_title("Polish Clock")
        self.set_decorated(False)
        self.set_type_hint(Gdk.WindowTypeHint.UTILITY)
        self.set_default_size(self.settings.get('width'), self.settings.get('height'))

        window_x = self.settings.get('window_x')
        window_y = self.settings.get('window_y')
        if window_x is not None and window_y is not None:
            self.move(window_x, window_y)

        if self.settings.get('always_on_top'):
            self.set_keep_above(True)

        self.drawing_area = Gtk.DrawingArea()
        self.drawing_area.connect('draw', self.on_draw)

        self.event_box = Gtk.EventBox()
        self.event_box.add(self.drawing_area)
        self.event_box.set_events(Gdk.EventMask.BUTTON_PRESS_MASK |
                                  Gdk.EventMask.BUTTON_RELEASE_MASK |
                                  Gdk.EventMask.POINTER_MOTION_MASK)
        self.event_box.connect('button-press-event', self.on_button_press)
        self.event_box.connect('motion-notify-event', self.on_motion_notify)
        self.add(self.event_box)

        self.watch_face = WatchFace(
            renderer,
            invalidate=self.drawing_area.queue_draw,
            timer=GLibTimer(),
            time_source=TimeSource.from_setting(self.settings.get('time_zone')),
            time_zone_monitor=TimeZoneMonitor(self.on_time_zone_changed),
            interval_ms=self.settings.update_interval(),
        )
        self.watch_face.notify_properties(self.settings.get('low_bit_ambient'))
        if self.settings.get('start_ambient'):
            self.watch_face.notify_ambient(True)

        self._time_tick_source = GLib.timeout_add_seconds(TIME_TICK_SECONDS, self.on_time_tick)
        self._restart_idle_timer()

        self.connect('destroy', self.on_destroy)
        self.connect('key-press-event', self.on_key_press)
        self.connect('map-event', self.on_map_event)
        self.connect('unmap-event', self.on_unmap_event)
        self.connect('window-state-event', self.on_window_state_event)
        self.connect('configure-event', self.on_configure)

    def on_draw(self, widget, cr):
        """Draw the face over the whole allocation, ignoring any insets"""
        width = widget.get_allocated_width()
        height = widget.get_allocated_height()
        if width <= 0 or height <= 0:
            return False
        self.watch_face.draw(cr, width, height)
        return False

    def on_map_event(self, widget, event):
        self.watch_face.notify_visibility(True)
        return False

    def on_unmap_event(self, widget, event):
        self.watch_face.notify_visibility(False)
        return False

    def on_window_state_event(self, widget, event):
        if event.changed_mask & Gdk.WindowState.ICONIFIED:
            iconified = bool(event.new_window_state & Gdk.WindowState.ICONIFIED)
            self.watch_face.notify_visibility(not iconified)
        return False

    def on_time_zone_changed(self):
        self.watch_face.notify_time_zone(self.watch_face.time_source.time_zone)

    def on_time_tick(self):
        self.watch_face.notify_time_tick()
        return True

    def set_ambient(self, ambient):
        self._idle_ambient = False
        self.watch_face.notify_ambient(ambient)

    def _restart_idle_timer(self):
        """(Re)arm the timer that drops into ambient mode after inactivity"""
        if self._idle_source is not None:
            GLib.source_remove(self._idle_source)
            self._idle_source = None
        timeout = self.settings.get('ambient_idle_timeout')
        if timeout and timeout > 0:
            self._idle_source = GLib.timeout_add_seconds(timeout, self.on_idle_timeout)

    def on_idle_timeout(self):
        self._idle_source = None
        if not self.watch_face.render_state.ambient:
            self.watch_face.notify_ambient(True)
            self._idle_ambient = True
        return False

    def on_motion_notify(self, widget, event):
        if self._idle_ambient:
            self.set_ambient(False)
        self._restart_idle_timer()
        return True

    def on_key_press(self, widget, event):
        if event.keyval == Gdk.KEY_Escape or event.keyval == Gdk.KEY_q:
            self.close()
        elif event.keyval == Gdk.KEY_a:
            self.set_ambient(not self.watch_face.render_state.ambient)

    def on_button_press(self, widget, event):
        """Left button drags the window, right button opens the menu"""
        if self._idle_ambient:
            self.set_ambient(False)
        self._restart_idle_timer()

        if event.button == 1:
            gdk_window = self.get_window()
            if gdk_window:
                gdk_window.begin_move_drag(
                    event.button,
                    int(event.x_root),
                    int(event.y_root),
                    event.time
                )
        elif event.button == 3:
            self.show_context_menu(event)
        return True

    def show_context_menu(self, event):
        menu = Gtk.Menu()

        ambient_item = Gtk.CheckMenuItem(label="Ambient Mode")
        ambient_item.set_active(self.watch_face.render_state.ambient)
        ambient_item.connect("toggled", self.on_ambient_toggled)
        menu.append(ambient_item)

        low_bit_item = Gtk.CheckMenuItem(label="Low-bit Ambient")
        low_bit_item.set_active(self.settings.get('low_bit_ambient'))
        low_bit_item.connect("toggled", self.on_low_bit_ambient_toggled)
        menu.append(low_bit_item)

        always_on_top_item = Gtk.CheckMenuItem(label="Always on Top")
        always_on_top_item.set_active(self.settings.get('always_on_top'))
        always_on_top_item.connect("toggled", self.on_always_on_top_toggled)
        menu.append(always_on_top_item)

        menu.append(Gtk.SeparatorMenuItem())

        exit_item = Gtk.MenuItem(label="Exit")
        exit_item.connect("activate", lambda item: self.close())
        menu.append(exit_item)

        menu.show_all()
        menu.popup(None, None, None, None, event.button, event.time)

    def on_ambient_toggled(self, widget):
        self.set_ambient(widget.get_active())

    def on_low_bit_ambient_toggled(self, widget):
        low_bit_ambient = widget.get_active()
        self.settings.set('low_bit_ambient', low_bit_ambient)
        self.watch_face.notify_properties(low_bit_ambient)
        self.drawing_area.queue_draw()

    def on_always_on_top_toggled(self, widget):
        always_on_top = widget.get_active()
        self.settings.set('always_on_top', always_on_top)
        self.set_keep_above(always_on_top)

    def on_configure(self, widget, event):
        """Track window geometry for the next start"""
        self.settings.set('window_x', event.x)
        self.settings.set('window_y', event.y)
        self.settings.set('width', event.width)
        self.settings.set('height', event.height)
        return False

    def on_destroy(self, widget):
        self.watch_face.destroy()
        GLib.source_remove(self._time_tick_source)
        if self._idle_source is not None:
            GLib.source_remove(self._idle_source)
            self._idle_source = None

        if self.settings.is_dirty:
            self.settings.save()
        Gtk.main_quit()


def main():
    sys.excepthook = exception_hook

    settings = Settings()
    settings.load()

    face = Face(settings.get('active_face_name'))
    face.load()

    try:
        renderer = ClockRenderer.from_face(face)
    except (ResourceLoadError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        show_error_dialog("The watch face could not be loaded", str(e))
        return 1

    clock = PolishClock(settings, renderer)
    clock.show_all()
    Gtk.main()
    return 0


if __name__ == '__main__':
    sys.exit(main())
