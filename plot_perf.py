import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

# 1) Load the CSV, keep only runs whose report matched
df = pd.read_csv("stream_perf.csv")
df = df[(df["ok"] == 1) & (df["size"] > 0)].copy()
df["mbps"] = df["size"] / df["duration"] / 1e6

# 2) Throughput vs Payload Size
df_size = df.groupby("size")["mbps"].mean().reset_index()
plt.figure()
plt.plot(df_size["size"], df_size["mbps"], marker="o")
plt.xscale("log")
plt.xlabel("Payload Size (bytes)")
plt.ylabel("Throughput (MB/s)")
plt.title("Throughput vs Payload Size")
plt.grid(True)
plt.savefig("perf_vs_size.png")

# 3) Throughput vs Chunk Size, largest payload only
df_chunk = df[df["size"] == df["size"].max()]
df_chunk = df_chunk.groupby("chunk_size")["mbps"].mean().reset_index()
plt.figure()
plt.plot(df_chunk["chunk_size"], df_chunk["mbps"], marker="o")
plt.xscale("log")
plt.xlabel("Client Chunk Size (bytes)")
plt.ylabel("Throughput (MB/s)")
plt.title("Throughput vs Chunk Size")
plt.grid(True)
plt.savefig("perf_vs_chunk_size.png")
