#!/usr/bin/env python3
import argparse, asyncio, json, pathlib, statistics, time
import httpx
from faqbot.core.config import Settings
from faqbot.faq.corpus import load_corpus
from faqbot.faq.service import bootstrap

GOLD_PATH = pathlib.Path("data/gold_set.jsonl")
OUT_PATH = pathlib.Path("eval_results.jsonl")

def load_gold(path: pathlib.Path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]

async def eval_local(gold, cfg: Settings):
    ctx = await bootstrap(cfg)
    rows = []
    for row in gold:
        t0 = time.time()
        lang = ctx.identifier.identify(row["question"])
        result = await ctx.matcher.match(row["question"], lang)
        ms = (time.time() - t0) * 1000.0
        got = result.entry.id if result.entry is not None else None
        rows.append({
            "question": row["question"], "lang": lang, "route": result.kind,
            "score": round(result.score, 4), "faq_id": got, "expected": row["faq_id"],
            "hit": got == row["faq_id"], "latency_ms": ms,
        })
    return rows

def eval_api(gold, api: str, cfg: Settings):
    # the API only returns the reply text, so compare it with the expected answer
    answers = {e.id: e.answer for e in load_corpus(cfg.faq_path)}
    rows = []
    with httpx.Client(base_url=api, timeout=30) as client:
        for row in gold:
            t0 = time.time()
            r = client.post("/ask", json={"question": row["question"]})
            ms = (time.time() - t0) * 1000.0
            r.raise_for_status()
            reply = r.json().get("reply")
            expected = answers.get(row["faq_id"])
            hit = reply == expected if expected is not None else reply not in answers.values()
            rows.append({"question": row["question"], "reply": reply, "expected": row["faq_id"],
                         "hit": hit, "latency_ms": ms})
    return rows

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--gold", default=str(GOLD_PATH))
    ap.add_argument("--api", default=None, help="Base API URL; evaluates in process when omitted")
    ap.add_argument("--faq_path", default=None)
    ap.add_argument("--embedder", default=None, help="sentence-transformers or hash")
    args = ap.parse_args()

    cfg = Settings()
    overrides = {k: v for k, v in {"faq_path": args.faq_path, "embedder": args.embedder}.items() if v}
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    gold = load_gold(pathlib.Path(args.gold))
    rows = eval_api(gold, args.api, cfg) if args.api else asyncio.run(eval_local(gold, cfg))

    with OUT_PATH.open("w", encoding="utf-8") as out:
        for r in rows:
            out.write(json.dumps(r, ensure_ascii=False) + "\n")

    lat = [r["latency_ms"] for r in rows]
    summary = {
        "accuracy": round(sum(r["hit"] for r in rows) / max(len(rows), 1), 3),
        "p50_ms": int(statistics.median(lat)) if lat else 0,
        "count": len(rows),
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2))

if __name__ == "__main__":
    main()
