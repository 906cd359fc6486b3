import numpy as np

from .ray_trace import SURFACE_NORMAL, view_direction, refract_dir, fresnel_coeff

# Denominators below this are treated as the fully reflective limit.
DENOM_EPS = 1e-12

# Upper clamp for the base reflectance fed to the (n, k) back-solve; n_max(1) is singular.
MAX_BASE_REFLECTANCE = 0.99


def _as_output(arr):
    return float(arr) if np.ndim(arr) == 0 else arr


# ------------------------------------------------------------------
#   PHYSICAL MODEL (complex index of refraction)
# ------------------------------------------------------------------

def reflectance(n, k, cos_theta):
    """
    Unpolarized reflectance of an absorbing medium with complex index n + ik,
    lit from air. Average of the s- and p-polarized terms, clamped to [0, 1].

    Inputs broadcast, so per-channel triplets and arrays of cosines both work.
    """
    n = np.asarray(n, dtype=float)
    k = np.asarray(k, dtype=float)
    c = np.clip(np.asarray(cos_theta, dtype=float), 0.0, 1.0)

    nk2 = n * n + k * k
    rs_num = nk2 - 2 * n * c + c * c
    rs_den = nk2 + 2 * n * c + c * c
    rp_num = nk2 * c * c - 2 * n * c + 1
    rp_den = nk2 * c * c + 2 * n * c + 1

    with np.errstate(divide="ignore", invalid="ignore"):
        rs = rs_num / rs_den
        rp = rp_num / rp_den
        result = 0.5 * (rs + rp)

    degenerate = (np.abs(rs_den) < DENOM_EPS) | (np.abs(rp_den) < DENOM_EPS)
    result = np.where(degenerate, 1.0, result)
    return _as_output(np.clip(result, 0.0, 1.0))


def complex_fresnel_rgb(n, k, cos_theta):
    """
    Physical reflectance for red/green/blue n and k triplets.
    A scalar cosine gives shape (3,); an array of cosines gives shape (len, 3).
    """
    c = np.asarray(cos_theta, dtype=float)
    return reflectance(np.asarray(n, dtype=float), np.asarray(k, dtype=float), c[..., None])


# ------------------------------------------------------------------
#   PRODUCTION APPROXIMATION (base/reflection colors + IOR)
# ------------------------------------------------------------------

def ior_blend_factor(ior, cos_theta):
    """Dielectric Fresnel weight of the reflection color for the given IOR and view cosine."""
    view = view_direction(cos_theta)
    # TIR cannot happen for air -> ior > 1; the flag is informational only.
    refracted, _internal = refract_dir(view, SURFACE_NORMAL, ior)
    return fresnel_coeff(view, SURFACE_NORMAL, refracted, ior)


def approximate(base, grazing, ior, cos_theta):
    """
    Metallic Fresnel as a renderer material computes it: blend from the base
    color to the reflection (grazing) color by the dielectric Fresnel
    coefficient of a single IOR shared by all three channels.

    ior and cos_theta broadcast against each other; the channel axis is appended
    last, so ior of shape (C, 1) with cosines of shape (A,) gives (C, A, 3).
    """
    base = np.asarray(base, dtype=float)
    grazing = np.asarray(grazing, dtype=float)
    f = np.asarray(ior_blend_factor(ior, cos_theta))[..., None]
    return base * (1.0 - f) + grazing * f


# ------------------------------------------------------------------
#   REFERENCE APPROXIMATION (artist-friendly metallic Fresnel)
#   Gulbrandsen, "Artist Friendly Metallic Fresnel", JCGT 3(4), 2014.
# ------------------------------------------------------------------

def n_min(r):
    return (1 - r) / (1 + r)


def n_max(r):
    sr = np.sqrt(r)
    return (1 + sr) / (1 - sr)


def get_n(r, g):
    return n_min(r) * g + (1 - g) * n_max(r)


def get_k2(r, n):
    nr = (n + 1) * (n + 1) * r - (n - 1) * (n - 1)
    return nr / (1 - r)


def get_r(n, k):
    return ((n - 1) * (n - 1) + k * k) / ((n + 1) * (n + 1) + k * k)


def get_g(n, k):
    """Inverse of get_n: edge tint that reproduces n for the reflectance of (n, k)."""
    r = get_r(n, k)
    return (n_max(r) - n) / (n_max(r) - n_min(r))


def olefresnel(r, g, c):
    """
    Reflectance from a base reflectance r and edge tint g at view cosine c.

    Back-solves a plausible (n, k) and evaluates the conductor Fresnel terms with
    them. Only r is clamped (to [0, 0.99]); g is used as given. The result is not
    clamped.
    """
    r = np.clip(np.asarray(r, dtype=float), 0.0, MAX_BASE_REFLECTANCE)
    g = np.asarray(g, dtype=float)
    c = np.asarray(c, dtype=float)

    n = get_n(r, g)
    k2 = get_k2(r, n)

    rs_num = n * n + k2 - 2 * n * c + c * c
    rs_den = n * n + k2 + 2 * n * c + c * c
    rs = rs_num / rs_den

    rp_num = (n * n + k2) * c * c - 2 * n * c + 1
    rp_den = (n * n + k2) * c * c + 2 * n * c + 1
    rp = rp_num / rp_den

    return _as_output(0.5 * (rs + rp))


def reference_approx(base, grazing, cos_theta):
    """Per-channel olefresnel. Shape rules match complex_fresnel_rgb."""
    c = np.asarray(cos_theta, dtype=float)
    return olefresnel(np.asarray(base, dtype=float), np.asarray(grazing, dtype=float), c[..., None])
