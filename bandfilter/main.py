import sys
import time
from dataclasses import dataclass

from .config import DiffusionConfig, MedianConfig
from .distributed import distributed_filter
from .errors import ConfigError, FilterError, UsageError
from .filters import BACKENDS, MPI, THREADS, apply_filter
from .image import load_image, save_image

USAGE = """Usage: bandfilter [--backend=threads|processes|mpi] <filter_type> <input_image> <output_image> <filter_params...> <workers>
Filter types:
  diffusion <iterations> <lambda>
  median <window_size>"""

FILTER_PARAMS = {"diffusion": 2, "median": 1}


@dataclass(frozen=True)
class Request:
    input_path: str
    output_path: str
    config: object
    backend: str


def parse_args(argv):
    backend = THREADS
    args = []

    for arg in argv:
        if arg.startswith("--backend="):
            backend = arg.split("=", 1)[1]
        else:
            args.append(arg)

    if backend not in BACKENDS:
        raise UsageError(f"Unknown backend: {backend}")
    if not args:
        raise UsageError("Missing filter type")

    filter_type = args[0].lower()
    if filter_type not in FILTER_PARAMS:
        raise UsageError(f"Unknown filter type: {filter_type}")
    if len(args) != FILTER_PARAMS[filter_type] + 4:
        raise UsageError(f"Wrong number of arguments for {filter_type}")

    input_path, output_path = args[1], args[2]
    try:
        num_workers = int(args[-1])
        if filter_type == "diffusion":
            config = DiffusionConfig(int(args[3]), float(args[4]), num_workers)
        else:
            config = MedianConfig(int(args[3]), num_workers)
    except ValueError as exc:
        raise UsageError(f"Invalid numeric argument: {exc}") from exc

    return Request(input_path, output_path, config, backend)


def run(request):
    # Load image
    start_time = time.time()
    img_array, width, height, channels = load_image(request.input_path)
    load_time = time.time() - start_time
    print(f"Image loading took {load_time * 1000:.2f}ms")

    # Apply filter
    start_time = time.time()
    filtered_array = apply_filter(img_array, request.config, request.backend)
    filter_time = time.time() - start_time
    print(f"{request.config.name.capitalize()} processing took {filter_time * 1000:.2f}ms")

    # Save image
    start_time = time.time()
    save_image(request.output_path, filtered_array, width, height, channels)
    save_time = time.time() - start_time
    print(f"Image saving took {save_time * 1000:.2f}ms")

    total_time = load_time + filter_time + save_time
    print(f"Total time: {total_time * 1000:.2f}ms")


def run_mpi(request):
    """Entry point for every rank of an ``mpiexec`` launch."""
    from mpi4py import MPI as mpi

    comm = mpi.COMM_WORLD
    rank = comm.Get_rank()
    img_array = None

    if rank == 0:
        # Load image
        start_time = time.time()
        try:
            img_array, width, height, channels = load_image(request.input_path)
            if comm.Get_size() != request.config.workers:
                raise ConfigError(
                    f"worker count {request.config.workers} does not match "
                    f"the {comm.Get_size()} MPI processes"
                )
            request.config.validate(height)
        except FilterError as exc:
            print(f"Error: {exc}")
            comm.Abort(1)
        load_time = time.time() - start_time
        print(f"Image loading took {load_time * 1000:.2f}ms")

    # Apply filter
    start_time = time.time()
    filtered_array = distributed_filter(comm, img_array, request.config)

    if rank != 0:
        return 0

    filter_time = time.time() - start_time
    print(f"{request.config.name.capitalize()} processing took {filter_time * 1000:.2f}ms")

    # Save image
    start_time = time.time()
    try:
        save_image(request.output_path, filtered_array, width, height, channels)
    except FilterError as exc:
        print(f"Error: {exc}")
        return 1
    save_time = time.time() - start_time
    print(f"Image saving took {save_time * 1000:.2f}ms")

    total_time = load_time + filter_time + save_time
    print(f"Total time: {total_time * 1000:.2f}ms")
    return 0


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv

    try:
        request = parse_args(argv)
    except UsageError as exc:
        print(exc)
        print(USAGE)
        return 1

    if request.backend == MPI:
        return run_mpi(request)

    try:
        run(request)
    except FilterError as exc:
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
