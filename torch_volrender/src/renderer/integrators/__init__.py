from torch_volrender.src.renderer.integrators.integrator_base import (
    IntegrationResult,
    IntegratorBase,
)
from torch_volrender.src.renderer.integrators.single_scattering_integrator import (
    SingleScatteringIntegrator,
)
