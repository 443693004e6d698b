"""Demo: lifetime fit model with a double-Gaussian resolution."""
import logging

from resolutionmodels.core.node import RealVariable
from resolutionmodels.logging_config import setup_logging
from resolutionmodels.models.add_model import AddModel
from resolutionmodels.models.gauss_model import GaussModel
from resolutionmodels.pdfs.convoluted_pdf import DecayPdf

logger = logging.getLogger("resolutionmodels.demo")


def main() -> None:
    setup_logging(level=logging.INFO)

    t = RealVariable("t", 1.0, -5.0, 15.0, unit="ps", title="Decay time")
    tau = RealVariable("tau", 1.5, 0.1, 5.0, unit="ps")
    bias = RealVariable("bias", 0.0)
    sigma_core = RealVariable("sigma_core", 0.3, 0.01, 2.0)
    sigma_tail = RealVariable("sigma_tail", 1.2, 0.01, 5.0)
    frac_core = RealVariable("frac_core", 0.8, 0.0, 1.0)

    core = GaussModel("core", t, bias, sigma_core)
    tail = GaussModel("tail", t, bias, sigma_tail)
    resolution = AddModel("resolution", [core, tail], [frac_core], title="Double Gaussian resolution")

    decay = DecayPdf("decay", t, tau, resolution, title="Smeared decay")

    norm = decay.get_norm({t})
    logger.info(f"Normalization over t in [{t.min}, {t.max}]: {norm:.6f}")
    for value in (-1.0, 0.0, 1.0, 3.0):
        t.set_value(value)
        logger.info(f"pdf(t={value:+.1f}) = {decay.get_val({t}):.6f}")

    decay.plot(t)


if __name__ == "__main__":
    main()
