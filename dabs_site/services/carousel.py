"""Index bookkeeping for the infinite strain carousel.

The track holds the last ``K`` strains as clones, then every real strain, then
the first ``K`` strains as clones. Moving into either clone zone is animated
like any other step; once the transition ends the index jumps, without
animation, to the real slide showing the same strain.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from dabs_site.schemas.catalog import CarouselFrame, CarouselTrack, StrainSlide

STRAINS_FOLDER = "assets/images/strains/"
FALLBACK_IMAGE = "assets/images/dabs_packaging.png"
CARDS_PER_VIEW = 3
AUTO_PLAY_INTERVAL_MS = 3000
SWIPE_THRESHOLD = 50

STRAINS = [
    "Hawaiian Sweet Roll",
    "Heat Peaches x Mystery Meat",
    "Honey Icing",
    "Horchata Papaya",
    "Lemon Horchata",
    "Lemon Papaya Banana",
    "Lemon Zprite",
    "Peach Smoothie",
    "Strawberry Peach Pie",
    "Zkittles",
]


def strain_image(name: str, folder: str = STRAINS_FOLDER) -> str:
    return folder + name.replace(" ", "_") + ".png"


class StrainCarousel:
    def __init__(
        self,
        strains: Sequence[str] = STRAINS,
        *,
        cards_per_view: int = CARDS_PER_VIEW,
        card_width: float = 0.0,
    ) -> None:
        self.strains = list(strains)
        self.clone_count = min(cards_per_view, len(self.strains))
        self.card_width = card_width
        self.index = self.clone_count
        self.is_transitioning = False
        self.autoplay_paused = False

    @property
    def real_count(self) -> int:
        return len(self.strains)

    def slides(self) -> List[StrainSlide]:
        n, k = self.real_count, self.clone_count
        order = list(range(n - k, n)) + list(range(n)) + list(range(k))
        return [
            StrainSlide(
                position=position,
                strain_index=strain_index,
                name=self.strains[strain_index],
                image=strain_image(self.strains[strain_index]),
                fallback_image=FALLBACK_IMAGE,
                is_clone=position < k or position >= n + k,
            )
            for position, strain_index in enumerate(order)
        ]

    def real_index(self, position: Optional[int] = None) -> int:
        if not self.real_count:
            return 0
        position = self.index if position is None else position
        return (position - self.clone_count) % self.real_count

    def frame(self, animate: bool) -> CarouselFrame:
        return CarouselFrame(
            index=self.index,
            offset=-(self.index * self.card_width),
            animate=animate,
            real_index=self.real_index(),
        )

    def _step(self, delta: int) -> Optional[CarouselFrame]:
        if self.is_transitioning or not self.real_count:
            return None
        self.is_transitioning = True
        self.index += delta
        return self.frame(animate=True)

    def next(self) -> Optional[CarouselFrame]:
        return self._step(1)

    def prev(self) -> Optional[CarouselFrame]:
        return self._step(-1)

    def transition_end(self) -> Optional[CarouselFrame]:
        """Settle after an animated step, jumping out of the clone zones."""

        self.is_transitioning = False
        n, k = self.real_count, self.clone_count
        if self.index >= n + k:
            self.index -= n
            return self.frame(animate=False)
        if self.index < k:
            self.index += n
            return self.frame(animate=False)
        return None

    def swipe(self, start_x: float, end_x: float) -> Optional[CarouselFrame]:
        diff = start_x - end_x
        if abs(diff) <= SWIPE_THRESHOLD:
            return None
        return self.next() if diff > 0 else self.prev()

    def resize(self, card_width: float) -> CarouselFrame:
        self.card_width = card_width
        return self.frame(animate=False)

    def pause_autoplay(self) -> None:
        self.autoplay_paused = True

    def resume_autoplay(self) -> None:
        self.autoplay_paused = False

    def autoplay_tick(self) -> Optional[CarouselFrame]:
        if self.autoplay_paused:
            return None
        return self.next()

    def track(self) -> CarouselTrack:
        return CarouselTrack(
            cards_per_view=self.clone_count,
            autoplay_interval_ms=AUTO_PLAY_INTERVAL_MS,
            slides=self.slides(),
            frame=self.frame(animate=False),
        )
