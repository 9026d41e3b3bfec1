from .render_slot import RenderSlot
from .renderer import PlaywrightPageRenderer
from .shared_browser import SharedBrowserPool

__all__ = ["PlaywrightPageRenderer", "RenderSlot", "SharedBrowserPool"]
