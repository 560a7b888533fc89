"""Recognized mogrify option names.

The set mirrors the words listed on the mogrify reference page
(http://www.imagemagick.org/script/mogrify.php), including the argument
placeholders that appear next to each option. Names are stored lower-case
with hyphens, which is also the form ``normalize_option_name`` produces.
"""

FORMAT_OPTION = "format"

_MOGRIFY_OPTIONS = """
adaptive-blur adaptive-resize adaptive-sharpen adjoin affine alpha annotate
antialias append authenticate auto-gamma auto-level auto-orient background
bench iterations bias black-threshold blue-primary point blue-shift factor
blur border bordercolor brightness-contrast caption string cdl filename
channel type charcoal radius chop clip clamp clip-mask clip-path id clone
index clut contrast-stretch coalesce colorize color-matrix colors colorspace
combine comment compose operator composite compress contrast convolve
coefficients crop cycle amount decipher debug events define format:option
deconstruct delay delete density depth despeckle direction display server
dispose method distort dither draw edge emboss encipher encoding endian
enhance equalize evaluate evaluate-sequence extent extract family name fft
fill filter flatten flip floodfill flop font format frame function fuzz
distance fx expression gamma gaussian-blur geometry gravity green-primary
help identify ifft implode insert intent interlace interline-spacing
interpolate interword-spacing kerning label lat layers level limit
linear-stretch liquid-rescale log loop mask mattecolor median modulate
monitor monochrome morph morphology kernel motion-blur negate noise normalize
opaque ordered-dither nxn orient page paint ping pointsize polaroid angle
posterize levels precision preview print process image-filter profile
quality quantizespace quiet radial-blur raise random-threshold low,high
red-primary regard-warnings region remap render repage resample resize
respect-parentheses roll rotate degrees sample sampling-factor scale scene
seed segments selective-blur separate sepia-tone threshold set attribute
shade shadow sharpen shave shear sigmoidal-contrast size sketch solarize
splice spread strip stroke strokewidth stretch style swap indexes swirl
texture thumbnail tile tile-offset tint transform transparent transparent-color
transpose transverse treedepth trim undercolor unique-colors units unsharp
verbose version view vignette virtual-pixel wave weight white-point
white-threshold write
"""

RECOGNIZED_OPTIONS = frozenset(_MOGRIFY_OPTIONS.split())


def normalize_option_name(name: str) -> str:
    """Normalize an option name to its command-line spelling.

    Args:
        name: Option name as written by the caller (e.g. "auto_orient")

    Returns:
        Lower-case name with underscores and spaces mapped to hyphens

    Examples:
        >>> normalize_option_name("Auto_Orient")
        'auto-orient'
    """
    return name.strip().lower().replace("_", "-").replace(" ", "-")


def is_recognized(name: str) -> bool:
    """Check whether an option name is in the recognized option set."""
    return normalize_option_name(name) in RECOGNIZED_OPTIONS
