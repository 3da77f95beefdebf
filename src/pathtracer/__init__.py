"""Monte Carlo path tracer for sphere scenes, built on Taichi.

This package renders scenes of spheres with Monte Carlo path tracing on the
GPU or CPU using Taichi, with support for:
- Lambertian, fuzzy metal and dielectric (glass) materials
- A thin-lens camera with depth of field
- Per-pixel RNG streams for reproducible renders
- PNG output and a command-line renderer

Subpackages:
    core: Ray utilities, RNG streams, the integrator and the render driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Scattering models and material registries
    scene: Scene storage, the scene manager and the random sphere scene
    camera: Thin-lens camera with ray generation
    preview: Pixel sinks, PNG export and progress reporting
"""

__version__ = "0.1.0"
