"""
Trace builders and sample inputs shared by the test modules.
"""

from gantt_trace.trace import IngestResult, TraceStore


def make_store(*intervals) -> TraceStore:
    store = TraceStore()
    for iv in intervals:
        store.add(iv)
    return store.freeze()


def make_ingest(*intervals, **kwargs) -> IngestResult:
    return IngestResult(store=make_store(*intervals), **kwargs)


SAMPLE_PROFILE = """\
# profile_threads.dat
VLPROF arg +verilator+prof+threads+start+ 2
VLPROF arg +verilator+prof+threads+window+ 2
VLPROF stat yields 3
VLPROF stat ticks 400
VLPROF mtask 1 start 0 end 100 elapsed 100 predict_time 50 cpu 0 on thread 0
VLPROF mtask 2 start 0 end 40 elapsed 40 predict_time 0 cpu 1 on thread 1
VLPROF mtask 3 start 40 end 100 elapsed 60 predict_time 60 cpu 1 on thread 1
VLPROF mtask 1 start 100 end 150 elapsed 50 predict_time 70 cpu 0 on thread 0
some vendor line
"""

SAMPLE_CPUINFO = """\
processor\t: 0
physical id\t: 0
core id\t\t: 0
model name\t: Example CPU @ 3.00GHz

processor\t: 1
physical id\t: 0
core id\t\t: 0
model name\t: Example CPU @ 3.00GHz

processor\t: 2
physical id\t: 1
core id\t\t: 4
model name\t: Example CPU @ 3.00GHz
"""
