import numpy as np

# Surface normal of the flat sample; the viewer sits on the +Z side.
SURFACE_NORMAL = np.array([0.0, 0.0, 1.0])

# Threshold below which a cosine counts as grazing (and above 1 - EPS as normal incidence).
COS_EPS = 1e-12

# ------------------------------------------------------------------
#   VIEWING GEOMETRY
# ------------------------------------------------------------------

def view_direction(cos_theta):
    """
    Unit direction of a ray hitting the surface at the angle given by cos_theta.
    Lies in the XZ plane and points into the surface: (sqrt(1-c^2), 0, -c).
    Accepts scalars or arrays; returns shape (..., 3).
    """
    c = np.clip(np.asarray(cos_theta, dtype=float), 0.0, 1.0)
    s = np.sqrt(1.0 - c * c)
    return np.stack([s, np.zeros_like(c), -c], axis=-1)


# ------------------------------------------------------------------
#   REFRACTION (Snell's Law)
# ------------------------------------------------------------------

def refract_dir(view_dir, normal, ior):
    """
    Refracts view_dir through an interface with relative index ior.

    A ray arriving against (or tangent to) the normal enters the medium (mu = 1/ior); a ray
    arriving along it leaves the medium (mu = ior). On total internal reflection
    the mirror direction is returned and the flag is set.

    For the metal fitting setup the ray always arrives from air onto a medium
    with ior > 1, so sin^2(t) = sin^2(i)/ior^2 < 1 and the flag is never set.
    It becomes reachable only for ior < 1 or rays leaving the medium.

    Returns:
        (np.ndarray, np.ndarray): Direction of shape (..., 3) and boolean TIR flag of shape (...).
    """
    view_dir = np.asarray(view_dir, dtype=float)
    normal = np.asarray(normal, dtype=float)
    ior = np.asarray(ior, dtype=float)

    dot = np.sum(view_dir * normal, axis=-1)
    entering = dot <= 0

    with np.errstate(divide="ignore"):
        mu = np.where(entering, 1.0 / ior, ior)

    # Flip the normal so it always faces the incoming ray
    facing = np.where(entering[..., None], normal, -normal)
    cos_i = np.abs(dot)

    sin2_t2 = mu**2 * (1.0 - cos_i**2)
    internal = sin2_t2 > 1.0

    factor = mu * cos_i - np.sqrt(np.maximum(0.0, 1.0 - sin2_t2))
    refracted = mu[..., None] * view_dir + factor[..., None] * facing
    reflected = view_dir + 2.0 * cos_i[..., None] * facing

    return np.where(internal[..., None], reflected, refracted), internal


# ------------------------------------------------------------------
#   DIELECTRIC FRESNEL COEFFICIENT
# ------------------------------------------------------------------

def fresnel_coeff(view_dir, normal, refract_dir, ior):
    """
    Unpolarized dielectric Fresnel reflectance in [0, 1] from the incident and
    refracted directions.

    Normal incidence (or ior == 1) uses ((ior-1)/(ior+1))^2. A grazing incident
    ray or a refracted ray that does not cross the interface (TIR) reflects fully.
    """
    ior = np.asarray(ior, dtype=float)
    cos_in = -np.sum(np.asarray(view_dir, dtype=float) * normal, axis=-1)
    cos_r = -np.sum(np.asarray(refract_dir, dtype=float) * normal, axis=-1)

    with np.errstate(divide="ignore", invalid="ignore"):
        ks = (cos_r / cos_in) * ior
        fs = ((ks - 1.0) / (ks + 1.0)) ** 2
        kp = (cos_in / cos_r) * ior
        fp = ((kp - 1.0) / (kp + 1.0)) ** 2
        f = 0.5 * (fs + fp)
        f0 = ((ior - 1.0) / (ior + 1.0)) ** 2

    f = np.where(cos_r < COS_EPS, 1.0, f)
    f = np.where(cos_in < COS_EPS, 1.0, f)
    f = np.where((cos_in > 1.0 - COS_EPS) | (ior == 1.0), f0, f)
    return np.clip(f, 0.0, 1.0)
