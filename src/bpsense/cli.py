"""Command line interface for the basis pursuit SENSE reconstruction."""

import argparse
import sys
import time
from collections.abc import Sequence

from bpsense.algorithms.reconstruction import BPSenseConfig, BPSenseReconstruction
from bpsense.data.cfl import read_cfl, write_cfl
from bpsense.data.dims import MAPS_DIM, check_compatible
from bpsense.utils.backend import Backend, BackendUnavailableError


def build_parser() -> argparse.ArgumentParser:
    """Create the parser of the command line arguments."""
    parser = argparse.ArgumentParser(
        prog='bpsense',
        description='Perform basis pursuit denoising for SENSE/ESPIRiT reconstruction: '
        'min_x ||T x||_1 + lambda/2 ||x||_2^2 subject to ||y - Ax||_2 <= eps',
    )
    parser.add_argument('kspace', help='k-space data (cfl)')
    parser.add_argument('sensitivities', help='sensitivity maps (cfl)')
    parser.add_argument('output', help='reconstructed image (cfl)')
    parser.add_argument('-e', dest='eps', type=float, default=BPSenseConfig.eps, help='data consistency error')
    parser.add_argument(
        '-r', dest='l2_weight', type=float, default=BPSenseConfig.l2_weight, help='l2 regularization parameter'
    )
    parser.add_argument(
        '-i', dest='max_iterations', type=int, default=BPSenseConfig.max_iterations, help='maximum number of iterations'
    )
    parser.add_argument('-u', dest='rho', type=float, default=BPSenseConfig.rho, help='ADMM penalty parameter')
    parser.add_argument('-c', dest='real_value_constraint', action='store_true', help='real-value constraint')
    parser.add_argument('-t', dest='use_tv', action='store_true', help='use TV norm')
    parser.add_argument('-g', dest='use_gpu', action='store_true', help='use GPU')
    parser.add_argument('-p', dest='pattern', default=None, help='sampling pattern (cfl)')
    parser.add_argument('-F', dest='truth', default=None, help='truth image (cfl)')
    parser.add_argument('--seed', type=int, default=None, help='seed for the random wavelet shifts')
    parser.add_argument('--progress', action='store_true', help='display a progress bar')
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the reconstruction from the command line.

    Parameters
    ----------
    argv
        command line arguments without the program name. If None, `sys.argv` is used.

    Returns
    -------
        exit status, 0 on success and 1 on invalid input or an unavailable device
    """
    start_time = time.perf_counter()
    args = build_parser().parse_args(argv)

    try:
        config = BPSenseConfig(
            eps=args.eps,
            l2_weight=args.l2_weight,
            rho=args.rho,
            max_iterations=args.max_iterations,
            real_value_constraint=args.real_value_constraint,
            regularizer='tv' if args.use_tv else 'wavelet',
            seed=args.seed,
        )
        backend = Backend.from_accelerator(args.use_gpu)

        kspace = read_cfl(args.kspace)
        maps = read_cfl(args.sensitivities)
        check_compatible(kspace.shape, maps.shape)

        if maps.shape[MAPS_DIM] > 1:
            print(f'{maps.shape[MAPS_DIM]} maps.\nESPIRiT reconstruction.')
        if config.l2_weight > 0:
            print(f'l2 regularization: {config.l2_weight:f}')
        print('use Total Variation' if args.use_tv else 'use Wavelets')

        pattern = read_cfl(args.pattern).real if args.pattern is not None else None
        truth = None
        if args.truth is not None:
            print('Compare to truth')
            truth = read_cfl(args.truth)

        reconstruction = BPSenseReconstruction(config, backend, progress=args.progress)
        result = reconstruction(kspace, maps, pattern, truth)
    except (ValueError, BackendUnavailableError) as e:
        print(f'bpsense: {e}', file=sys.stderr)
        return 1

    statistics = result.statistics
    print(f'Size: {statistics.n_voxels} Samples: {round(statistics.n_samples)} Acc: {statistics.acceleration:.2f}')
    print(f'Scaling: {result.scaling:f}')
    if result.nrmse:
        print(f'NRMSE: {result.nrmse[-1]:f}')

    write_cfl(args.output, result.image)
    print(f'Total Time: {time.perf_counter() - start_time:f}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
