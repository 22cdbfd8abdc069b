import asyncio

from rpsbrain import Move, OpponentBrain, Session

# Simple smoke test: player always plays Paper, no model configured (fallback only)
brain = OpponentBrain(random_seed=7)
session = Session(config=brain.config)


async def main():
    for t in range(10):
        result = await brain.play(session.build_request(Move.PAPER))
        session.apply(result)
        print(
            f"round={t+1} ai_move={result.ai_move.value} winner={result.winner.value} "
            f"tier={result.difficulty_level.value} predicted={result.predicted_player_move.value}"
        )
    s = session.stats
    print(f"Summary: wins={s.wins} draws={s.draws} losses={s.losses}")


asyncio.run(main())
