"""Message passing between the ranks of a process group.

Ranks talk through objects with the lowercase (pickle based) API of
``mpi4py.MPI.Comm``: ``Get_rank``, ``Get_size``, ``send``, ``recv``,
``sendrecv``, ``scatter``, ``gather`` and ``bcast``. ``MPI.COMM_WORLD``
satisfies it when the program runs under ``mpiexec``; ``PipeCommunicator``
satisfies it for a group of local processes started by ``run_local_group``.
"""
import multiprocessing

from .errors import CollectiveError


class PipeCommunicator:
    """Communicator for one rank, holding a pipe to every other rank."""

    def __init__(self, rank, size, channels):
        self.rank = rank
        self.size = size
        self.channels = channels

    def Get_rank(self):
        return self.rank

    def Get_size(self):
        return self.size

    def send(self, obj, dest):
        try:
            self.channels[dest].send(obj)
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise CollectiveError(f"rank {dest} is gone, cannot send from rank {self.rank}") from exc

    def recv(self, source):
        try:
            return self.channels[source].recv()
        except (EOFError, ConnectionResetError) as exc:
            raise CollectiveError(f"rank {source} closed its channel to rank {self.rank}") from exc

    def sendrecv(self, sendobj, dest, source):
        # The lower rank of a pair sends first so that large messages
        # cannot fill both pipes at once.
        if dest == source and self.rank > dest:
            received = self.recv(source)
            self.send(sendobj, dest)
            return received
        self.send(sendobj, dest)
        return self.recv(source)

    def scatter(self, sendobj, root=0):
        if self.rank != root:
            return self.recv(root)
        if len(sendobj) != self.size:
            raise CollectiveError(f"scatter needs {self.size} items, got {len(sendobj)}")
        for rank in range(self.size):
            if rank != root:
                self.send(sendobj[rank], rank)
        return sendobj[root]

    def gather(self, sendobj, root=0):
        """Collect one object per rank on ``root``, in rank order."""
        if self.rank != root:
            self.send(sendobj, root)
            return None
        gathered = []
        for rank in range(self.size):
            gathered.append(sendobj if rank == root else self.recv(rank))
        return gathered

    def bcast(self, obj, root=0):
        if self.rank != root:
            return self.recv(root)
        for rank in range(self.size):
            if rank != root:
                self.send(obj, rank)
        return obj

    def close(self):
        for conn in self.channels.values():
            conn.close()


def open_channels(size, ctx=multiprocessing):
    """Create one duplex pipe per pair of ranks; returns a {peer: conn} map per rank."""
    channels = [{} for _ in range(size)]
    for i in range(size):
        for j in range(i + 1, size):
            conn_i, conn_j = ctx.Pipe(duplex=True)
            channels[i][j] = conn_i
            channels[j][i] = conn_j
    return channels


def run_rank(entry, rank, size, channels, config):
    comm = PipeCommunicator(rank, size, channels)
    try:
        entry(comm, None, config)
    finally:
        comm.close()


def run_local_group(entry, img_array, config):
    """Run ``entry(comm, img_array, config)`` SPMD style on ``config.workers`` ranks.

    Rank 0 runs in the calling process and owns the image; the other ranks
    are fresh processes that get ``None``. Returns rank 0's result.
    """
    size = config.workers
    ctx = multiprocessing.get_context("spawn")
    channels = open_channels(size, ctx)

    processes = []
    for rank in range(1, size):
        process = ctx.Process(
            target=run_rank,
            args=(entry, rank, size, channels[rank], config),
            daemon=True,
        )
        processes.append(process)

    for process in processes:
        process.start()

    # only the children may keep their ends open, or a dead peer never reads as EOF
    for rank in range(1, size):
        for conn in channels[rank].values():
            conn.close()

    comm = PipeCommunicator(0, size, channels[0])
    try:
        result = entry(comm, img_array, config)
    except BaseException:
        for process in processes:
            process.terminate()
        raise
    finally:
        comm.close()
        for process in processes:
            process.join()

    failed = [process.exitcode for process in processes if process.exitcode != 0]
    if failed:
        raise CollectiveError(f"{len(failed)} worker process(es) failed with exit codes {failed}")

    return result
