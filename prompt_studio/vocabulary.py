"""Built-in style vocabulary offered by the pickers and used by the narrative parser."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class StylePreset:
    label: str
    value: str


STYLE_PRESETS: Tuple[StylePreset, ...] = (
    StylePreset("Cinematic", "cinematic film still, dramatic lighting, rich depth of field"),
    StylePreset("Silver Age Comic", "silver age comic panel, ben-day dots, bold black inking, flat CMYK palette"),
    StylePreset(
        "Modern Graphic Novel",
        "modern graphic novel spread, layered digital shading, textured gradients, moody rim light",
    ),
    StylePreset(
        "Superhero Splash Page",
        "dynamic superhero splash page, exaggerated foreshortening, kinetic speed lines, explosive impact bursts",
    ),
    StylePreset(
        "Noir Comic",
        "noir graphic novel styling, heavy chiaroscuro, rain-soaked alley light, selective spot color",
    ),
    StylePreset(
        "Kirby Cosmic",
        "jack kirby-inspired cosmic comic art, thick contour lines, kirby crackle energy bubbles, high-saturation hues",
    ),
    StylePreset(
        "Manga Inked",
        "shonen manga double spread, crisp screentones, dynamic speed lines, expressive ink wash shadows",
    ),
    StylePreset(
        "Neon Cyberpunk Comic",
        "cyberpunk comic panel, neon rim lights, holographic signage, wet asphalt reflections",
    ),
    StylePreset("Painterly", "painterly illustration, expressive brushstrokes, layered pigments"),
    StylePreset("Dark Fantasy", "dark fantasy concept art, moody atmosphere, intricate gothic detail"),
    StylePreset("Retro Sci-Fi", "retro sci-fi pulp cover, neon gradients, chrome highlights"),
    StylePreset(
        "Western Splash",
        "western comic splash page, sun-bleached palette, dusty motion trails, cinematic lens flare",
    ),
    StylePreset(
        "Indie Risograph",
        "indie risograph comic aesthetic, duotone ink, grainy halftones, off-register charm",
    ),
    StylePreset(
        "Ukiyo-e Woodblock",
        "ukiyo-e woodblock print, flat perspective, bold outlines, muted natural colors",
    ),
    StylePreset("Art Deco", "art deco poster, geometric shapes, gold leaf accents, elegant typography"),
    StylePreset(
        "Vaporwave",
        "vaporwave aesthetic, glitch art, pastel gradients, greek statues, grid backgrounds",
    ),
    StylePreset(
        "Gothic Horror",
        "gothic horror illustration, victorian attire, fog, cobwebs, muted colors",
    ),
    StylePreset("Steampunk", "steampunk illustration, brass gears, steam, victorian fashion, sepia tones"),
)

COMPOSITION_OPTIONS: Tuple[str, ...] = (
    "Wide establishing shot",
    "Over-the-shoulder action",
    "Intimate portrait",
    "Two-shot standoff",
    "Crowd chaos with central hero",
    "Low-angle power pose",
    "High-angle vulnerability",
    "Rule-of-thirds hero off-center",
    "Symmetrical corridor framing",
    "Dutch angle tension",
    "Foreground occlusion peeking",
    "Depth-stacked silhouettes",
    "Vignette spotlight on subject",
    "Tracking run-and-gun feel",
    "Tabletop tactical map close-up",
    "Crossfire triangulation",
    "Portal doorway reveal",
    "Mirror or puddle reflection frame",
    "Split-screen montage",
    "Fisheye lens distortion",
    "Isometric view",
    "Top-down map view",
    "Comic panel breakout",
)

LIGHTING_OPTIONS: Tuple[str, ...] = (
    "Golden hour rim light",
    "Cold moonlight with mist",
    "Torchlit glow and soot",
    "Neon spill from signs",
    "Volumetric god rays",
    "Strobe burst in darkness",
    "Overcast softbox sky",
    "Backlit silhouette flare",
    "Candle cluster warmth",
    "Lightning flash accents",
    "Bi-color teal and amber",
    "Harsh interrogation top-light",
    "Under-lighting campfire",
    "Flickering CRT spill",
    "Subterranean bioluminescence",
    "Spell aura bloom",
    "Emergency red strobes",
    "Starfield key with soft fill",
    "Bioluminescent forest glow",
    "Underwater caustic patterns",
    "Disco ball reflections",
    "Laser grid",
    "Smartphone face glow",
)

MOOD_OPTIONS: Tuple[str, ...] = (
    "Triumphant",
    "Eerie suspense",
    "Solemn",
    "Desperate last stand",
    "Grim resolve",
    "Whimsical mischief",
    "Sacred awe",
    "Paranoid dread",
    "Stoic determination",
    "Melancholy quiet",
    "Ferocious blood-rush",
    "Hopeful respite",
    "Shock and disbelief",
    "Righteous fury",
    "Tense negotiation",
    "Black comedy",
    "Noble sacrifice",
    "Wild exultation",
    "Romantic longing",
    "Nostalgic warmth",
    "Cold indifference",
    "Chaotic panic",
    "Coffee shop chill",
)

CAMERA_OPTIONS: Tuple[str, ...] = (
    "35mm lens close-up",
    "24mm wide hero shot",
    "85mm portrait compression",
    "14mm ultra-wide cavern",
    "Macro detail insert",
    "Drone top-down",
    "Low dolly push-in",
    "Handheld jitter chase",
    "Static tripod tableau",
    "Crane rise reveal",
    "Rack focus pull",
    "Long exposure motion smear",
    "Slow shutter torch trails",
    "Overcranked slow motion",
    "POV helmet cam",
    "Gimbal glide through doorway",
    "Tilt-shift miniatures",
    "Fisheye claustrophobia",
    "Thermal imaging",
    "Night vision grain",
    "Security camera footage",
    "Dashcam perspective",
)

POST_PROCESSING_OPTIONS: Tuple[str, ...] = (
    "High-contrast grading",
    "Painterly brush texture",
    "Film grain and gate weave",
    "Bleach bypass steel",
    "Soft bloom and halation",
    "Cross-process retro",
    "Sepia parchment age",
    "Cool shadows warm highlights",
    "Split-toned dusk",
    "Vignette and subtle chromatic aberration",
    "CRT scanline composite",
    "Inked comic outlines",
    "Watercolor wash edges",
    "Desaturated war grime",
    "Neon synthwave glow",
    "Photochemical print fade",
    "Gritty LUT with crushed blacks",
    "Clean HDR pop",
    "Glitch art artifacts",
    "VHS tracking error",
    "Halftone pattern overlay",
    "Ben-Day dots overlay",
)


@dataclass(frozen=True)
class StyleVocabulary:
    """Allowed strings per style dimension plus the labelled presets."""

    compositions: Tuple[str, ...] = ()
    lightings: Tuple[str, ...] = ()
    moods: Tuple[str, ...] = ()
    cameras: Tuple[str, ...] = ()
    post_processings: Tuple[str, ...] = ()
    presets: Tuple[StylePreset, ...] = ()

    def dimensions(self) -> List[Tuple[str, Tuple[str, ...]]]:
        return [
            ("composition", self.compositions),
            ("lighting", self.lightings),
            ("mood", self.moods),
            ("camera", self.cameras),
            ("post_processing", self.post_processings),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compositions": list(self.compositions),
            "lightings": list(self.lightings),
            "moods": list(self.moods),
            "cameras": list(self.cameras),
            "post_processings": list(self.post_processings),
            "presets": [{"label": preset.label, "value": preset.value} for preset in self.presets],
        }


DEFAULT_VOCABULARY = StyleVocabulary(
    compositions=COMPOSITION_OPTIONS,
    lightings=LIGHTING_OPTIONS,
    moods=MOOD_OPTIONS,
    cameras=CAMERA_OPTIONS,
    post_processings=POST_PROCESSING_OPTIONS,
    presets=STYLE_PRESETS,
)
