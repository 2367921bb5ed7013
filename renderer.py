import pygame


def render_frame(screen: pygame.Surface, frame, sar: float = 1.0):
    """
    Scale and letter-/pillar-box a raw RGB frame onto `screen`.
    Leaves the screen black when no frame has arrived yet.
    """
    screen.fill((0, 0, 0))
    if frame is None:
        return
    surf   = pygame.image.frombuffer(frame.tobytes(), frame.shape[1::-1], "RGB")
    sw, sh = screen.get_size()
    vw, vh = surf.get_size()
    scale  = min(sw / (vw * sar), sh / vh)
    size   = (int(vw * scale * sar), int(vh * scale))
    surf   = pygame.transform.smoothscale(surf, size)
    screen.blit(surf, ((sw - size[0]) // 2, (sh - size[1]) // 2))
