from esper import World

from happymatch.events.bus import EVENT_TICK, EventBus
from happymatch.rendering.board_renderer import BoardRenderer
from happymatch.rendering.context import RenderContext, build_render_context
from happymatch.rendering.hud_renderer import HudRenderer
from happymatch.components.game_state import GamePhase
from happymatch.systems.board_ops import get_tile_registry

PADDING = 4


class RenderSystem:
    def __init__(self, world: World, event_bus: EventBus, window):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self._time = 0.0
        self._render_ctx: RenderContext | None = None
        self._board_renderer = BoardRenderer(padding=PADDING)
        self._hud_renderer = HudRenderer()

    @property
    def last_context(self) -> RenderContext | None:
        return self._render_ctx

    def on_tick(self, sender, **kwargs):
        self._time += float(kwargs.get('dt', 1/60))

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        # Headless safeguard: with no active Arcade window, build the context but skip draw calls.
        headless = False
        try:
            arcade.get_window()
        except Exception:
            headless = True
        ctx = build_render_context(self.world, self.window.width, self.window.height)
        self._render_ctx = ctx
        if headless:
            return
        if ctx.phase is not GamePhase.MENU:
            self._board_renderer.render(arcade, ctx, get_tile_registry(self.world))
        self._hud_renderer.render(arcade, ctx)
