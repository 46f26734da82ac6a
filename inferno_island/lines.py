"""Static text banks — character lines, inner thoughts, titles, narratives.

Lines are keyed by (character_id, context). Contexts:

    conversation_open      opening line in an ordinary inferno scene
    conversation_response  reply from the other half of the pair
    confession             saying it out loud
    paradise_invite        asking / answering a paradise invitation
    jealousy               watching someone else get close
    paradise_date          paradise scene; these reveal the real occupation
    ceremony               final words at the coupling ceremony

Inner thoughts live in a separate bank keyed by (character_id, positive).
Narrative templates are ``str.format`` strings taking {male}, {female},
{day} and {time}. Lookups for unknown ids fall back to a placeholder instead
of raising, so a stray id in a generated payload never breaks a turn.
"""

from __future__ import annotations

import random
from types import MappingProxyType
from typing import NamedTuple

from inferno_island.models import Emotion, EventType


class Line(NamedTuple):
    text: str
    emotion: Emotion = "default"


PLACEHOLDER_LINE = Line("...", "default")
PLACEHOLDER_THOUGHTS = {
    True: "This might actually be going well.",
    False: "This is harder than I thought...",
}

_LINES: dict[str, dict[str, tuple[Line, ...]]] = {
    "kenji": {
        "conversation_open": (
            Line("This place is rougher than I expected."),
            Line("I can't ask what you do for a living. I'd still like to guess."),
            Line("You're different from everyone else here.", "flirty"),
            Line("Honestly? I've been curious about you since the first day.", "nervous"),
        ),
        "conversation_response": (
            Line("Huh. That's an interesting way to look at it.", "happy"),
            Line("I was thinking the same thing.", "happy"),
            Line("We get along better than I expected.", "flirty"),
        ),
        "confession": (
            Line("I didn't plan for this. I didn't plan on caring this much.", "nervous"),
            Line("I keep thinking about you even when you're not around.", "flirty"),
        ),
        "paradise_invite": (
            Line("If you're willing, I'd like some time with just the two of us.", "nervous"),
            Line("I want to talk properly. One on one.", "flirty"),
        ),
        "jealousy": (
            Line("...What were you two talking about?", "angry"),
            Line("I told myself it didn't bother me.", "sad"),
        ),
        "paradise_date": (
            Line("I'm an architect. I like designing the spaces people actually live in.", "nervous"),
            Line("It's strange how honest I can be around you.", "happy"),
        ),
        "ceremony": (
            Line("Three days, and I surprised myself. I've never been this aware of anyone."),
            Line("Something happened that I didn't calculate. That's my answer."),
        ),
    },
    "ryu": {
        "conversation_open": (
            Line("Can I ask you something? I honestly can't stop thinking about you.", "flirty"),
            Line("You get into my head the way a good song does.", "flirty"),
            Line("Out of everyone here, you're the only one I keep noticing.", "nervous"),
            Line("I like saying things straight. I'm really into you.", "happy"),
        ),
        "conversation_response": (
            Line("Wait, really? Me too!", "happy"),
            Line("That's cute. That thing you just did.", "flirty"),
            Line("Too honest? Sorry. That's just how I am.", "nervous"),
        ),
        "confession": (
            Line("I've fallen for you. I'm saying it plainly.", "happy"),
            Line("I know I'm jealous. I can't stop it.", "angry"),
        ),
        "paradise_invite": (
            Line("I want to be alone with you. Will you come?", "flirty"),
            Line("Come to paradise with me. I want to decide right now.", "happy"),
        ),
        "jealousy": (
            Line("I really didn't want to see you getting that close to him.", "angry"),
            Line("Yeah, it's jealousy. I admit it.", "sad"),
        ),
        "paradise_date": (
            Line("I'm a musician. My major-label debut is coming up soon.", "happy"),
            Line("I want to write a song for you. I mean it.", "flirty"),
        ),
        "ceremony": (
            Line("Same as music. If your heart moves, that's all there is."),
            Line("No time to hesitate. I'm going with the truth."),
        ),
    },
    "takeshi": {
        "conversation_open": (
            Line("You look a little tired. Are you alright?"),
            Line("When you laugh, the whole place gets brighter.", "happy"),
            Line("I'm glad we got to talk slowly. There's no need to hurry."),
            Line("What matters most is respecting the other person's pace."),
        ),
        "conversation_response": (
            Line("Yes. I think so too.", "happy"),
            Line("You're right. Thank you.", "happy"),
            Line("I'd never thought of it that way. I'm glad you told me.", "nervous"),
        ),
        "confession": (
            Line(
                "I've always preferred actions to words, but this needs saying. "
                "I care about you.",
                "nervous",
            ),
            Line("I'm not rushing you. I just wanted you to know."),
        ),
        "paradise_invite": (
            Line("If you like, let's go somewhere we can talk in peace.", "nervous"),
            Line("I'd like you to come to paradise. Take your time deciding."),
        ),
        "jealousy": (
            Line("...It's nothing. It just caught my attention.", "sad"),
            Line("She has her own pace. I know that.", "sad"),
        ),
        "paradise_date": (
            Line("I'm a surgeon. Lives depend on it, so I take it seriously.", "nervous"),
            Line("With you I forget about work. That's... rare for me.", "happy"),
        ),
        "ceremony": (
            Line("The time we spent here was real. I believe that."),
            Line("Actions over words, that's how I've lived. Today I'll use words."),
        ),
    },
    "yuki": {
        "conversation_open": (
            Line("Ugh, I refuse to lose at this!", "angry"),
            Line("That's kind of unfair of you, you know?", "flirty"),
            Line("We actually talked like normal people. Didn't expect that.", "happy"),
            Line("Just so you know, I never give up.", "happy"),
        ),
        "conversation_response": (
            Line("Wait, really? That makes me happy... was it all over my face?", "nervous"),
            Line("Nobody's ever said that to me before.", "flirty"),
            Line("Hold on, why is my heart racing?", "nervous"),
        ),
        "confession": (
            Line("I hate admitting defeat, but... I've fallen for you.", "nervous"),
            Line("People say I go cold on the one I really like. That's happening right now.", "flirty"),
        ),
        "paradise_invite": (
            Line("Can I go? Paradise, with you!", "happy"),
            Line("If you're asking, I'm going! I've been waiting!", "happy"),
        ),
        "jealousy": (
            Line("Hey! Why are you getting cozy with someone else?", "angry"),
            Line("It doesn't bother me at all... it totally bothers me.", "sad"),
        ),
        "paradise_date": (
            Line("I'm a fashion designer! I just started my own label.", "happy"),
            Line("Design isn't only how things look. It's giving feelings a shape.", "happy"),
        ),
        "ceremony": (
            Line("I always play to win. This time I found something that matters more."),
            Line("I gave it everything. I can say that with my head up."),
        ),
    },
    "hana": {
        "conversation_open": (
            Line("So. You're more observant than you look."),
            Line("Can you wait until I open up? It won't be easy."),
            Line("There's something about you that pulls me in. That's rare.", "flirty"),
            Line("Give me a little longer for my answer."),
        ),
        "conversation_response": (
            Line("Heh. I didn't see that reply coming.", "happy"),
            Line("I don't dislike people like you.", "flirty"),
            Line("I'm starting to get curious about you.", "happy"),
        ),
        "confession": (
            Line("I never expected to fall for someone this fast. It scares me a little.", "nervous"),
            Line("I'd never normally say this... but I think about you.", "nervous"),
        ),
        "paradise_invite": (
            Line("...Fine. I'll go to paradise with you."),
            Line("Let's go. I want to talk with you more.", "happy"),
        ),
        "jealousy": (
            Line("...I don't mind. Really.", "sad"),
            Line("This feeling is unusual for me. I might be a little jealous.", "angry"),
        ),
        "paradise_date": (
            Line("I'm a lawyer. I protect people's rights. It's rewarding, and lonely."),
            Line("With you my guard comes down. It's frightening and nice at once.", "nervous"),
        ),
        "ceremony": (
            Line("I didn't think my heart would move this quickly."),
            Line("My guard came down. That is my answer."),
        ),
    },
    "mia": {
        "conversation_open": (
            Line("Stop saying cute things! You're making me blush!", "happy"),
            Line("Can I talk about food? I think good food brings people together.", "happy"),
            Line("I'm starving. I wish we could eat something together.", "happy"),
            Line("You're way more fun than you look, you know.", "flirty"),
        ),
        "conversation_response": (
            Line("Wait, really?! That makes me so happy!", "happy"),
            Line("I was thinking the same. That's nice.", "happy"),
            Line("You do that sometimes. I like it.", "flirty"),
        ),
        "confession": (
            Line("Honestly... I've liked you for a while. I just couldn't say it.", "nervous"),
            Line("I smile without trying when I'm next to you. That matters to me.", "happy"),
        ),
        "paradise_invite": (
            Line("You're inviting me?! Yes, I want to go!", "happy"),
            Line("Paradise together... yes!", "happy"),
        ),
        "jealousy": (
            Line("Mm, it doesn't bother me at all? (It does.)", "sad"),
            Line("Those two seem close. It's complicated.", "sad"),
        ),
        "paradise_date": (
            Line("I'm a chef! I work at a French restaurant. I want to make people happy with food.", "happy"),
            Line("Someday I want you to taste my cooking. You'll love it, I promise.", "flirty"),
        ),
        "ceremony": (
            Line("Like cooking. Good ingredients make a good dish naturally. You were that."),
            Line("Having someone who keeps me smiling is enough."),
        ),
    },
}

_THOUGHTS: dict[str, dict[bool, tuple[str, ...]]] = {
    "kenji": {
        True: (
            "Why does she keep getting to me... I didn't plan for this.",
            "I don't usually feel like this.",
            "I can just be myself around her. Strange.",
        ),
        False: (
            "Did I misjudge this? Something feels off.",
            "I'm getting ahead of myself. Slow down.",
        ),
    },
    "ryu": {
        True: (
            "I did not expect to fall this hard.",
            "I can be myself when she's around.",
            "I want to tell her now. But it's scary.",
        ),
        False: (
            "Was I too much again? She might be pulling back.",
            "Maybe I read her wrong.",
        ),
    },
    "takeshi": {
        True: (
            "I want to keep talking to her.",
            "Maybe being there matters more than words.",
            "I'd like to get to know her slowly.",
        ),
        False: (
            "I may have stepped too close. Give her room.",
            "It's not the right time yet.",
        ),
    },
    "yuki": {
        True: (
            "Why am I nervous? This was not the plan.",
            "I want to win, but I'm starting to not mind losing.",
            "I can be honest in front of him somehow.",
        ),
        False: (
            "He's not looking at me. Whatever. It's fine. It's not fine.",
            "Did I come on too strong?",
        ),
    },
    "hana": {
        True: (
            "Rare. I haven't wanted to talk to someone like this in a long time.",
            "I don't want to lower my guard. But maybe I could.",
            "I feel I can trust him. No evidence, but still.",
        ),
        False: (
            "Not yet. I'm not convinced.",
            "He talks a lot. I'm still waiting to see what he does.",
        ),
    },
    "mia": {
        True: (
            "Heh, he's falling for it... wait, no, I actually like him.",
            "I smile without trying next to him.",
            "So cute. Why is he hiding it?",
        ),
        False: (
            "Maybe I showed too much. He might be put off.",
            "I got the distance wrong. No regrets though.",
        ),
    },
}

LINE_BANKS: MappingProxyType[tuple[str, str], tuple[Line, ...]] = MappingProxyType({
    (character_id, context): lines
    for character_id, contexts in _LINES.items()
    for context, lines in contexts.items()
})

THOUGHT_BANKS: MappingProxyType[tuple[str, bool], tuple[str, ...]] = MappingProxyType({
    (character_id, positive): thoughts
    for character_id, banks in _THOUGHTS.items()
    for positive, thoughts in banks.items()
})

TITLES: MappingProxyType[EventType, tuple[str, ...]] = MappingProxyType({
    "conversation": ("Just the Two of Us", "Unmasked", "Saying and Meaning", "Almost a Confession", "Closing the Distance"),
    "group_activity": ("Team Battle", "Working Together", "Survival Games", "Under the Stars", "Calm Before the Storm"),
    "confession": ("Brave Words", "For Real", "Heart Wide Open", "Finally Moving", "Floodgates"),
    "paradise_invite": ("An Invitation to Paradise", "A Special Invitation", "A Promise for Two", "The Door Opens"),
    "paradise_date": ("Paradise Miracle", "Secrets Revealed", "The Two of Them, Unmasked", "Meeting Again for the First Time"),
    "jealousy": ("Jealous Flames", "Can't Watch", "Wavering Heart", "An Invisible Wall", "Unsettled"),
    "drama": ("Ripples", "Tense Moment", "Boiling Over", "Misunderstanding and Truth", "Calm Before the Storm"),
    "introduction": ("Nice to Meet You", "First Impressions"),
    "ceremony": ("The Final Coupling",),
})

NARRATIVES: MappingProxyType[EventType, tuple[str, ...]] = MappingProxyType({
    "conversation": (
        "{male} and {female} walk along the beach, talking about themselves as the waves fill the silences.",
        "Once the sun eases off, {male} calls out to {female}. The conversation flows, and before they know it an hour has passed.",
        "{male} finds {female} on her own. It starts awkwardly, then slowly loosens up.",
        "In the quiet of the {time}, {male} and {female} sit across the campfire and talk about things that matter.",
        "{male} asks {female} about her hobbies, and little by little the distance between them shrinks.",
    ),
    "group_activity": (
        "Day {day}'s activity is beach volleyball for everyone. The team match gets far more heated than anyone expected.",
        "On day {day} the contestants cook together. People with very different skills end up laughing and surprised.",
        "A last-minute hike along the coast. On the rough path someone always ends up helping someone else.",
        "On the night of day {day} everyone gathers around the campfire, and honest words start to slip out.",
        "Day {day} brings a survival-skills contest. Unexpected sides of people come out one after another.",
    ),
    "confession": (
        "At dusk {male} finally approaches {female}. Somewhere no one can hear, he starts telling her how he feels.",
        "{male} decides to tell {female} everything he has been holding back. It is the first real nerves he has felt on the island.",
        "The moment they are alone, {male} turns to {female}. The thing he knew he had to say finally comes out.",
    ),
    "paradise_invite": (
        "{male} leans in and speaks softly to {female}. An invitation to paradise. Her expression changes.",
        "Careful not to be seen, {male} quietly calls {female} over. His eyes say he wants time alone with her.",
        "{male} walks up to {female} and holds out his hand. 'Come to paradise with me.' The words echo across the island.",
    ),
    "paradise_date": (
        "{male} and {female} arrive in paradise. Surrounded by luxury and a beautiful view, they finally show each other who they really are.",
        "Under the stars, {male} and {female} reveal the jobs they have kept secret. The surprise pulls them closer at once.",
        "Away from the noise of the inferno, a private time begins for {male} and {female}. Here the masks can come off.",
    ),
    "jealousy": (
        "Someone is watching {male} and {female} laugh together from a distance, and is thrown by the feeling spreading in their chest.",
        "Seeing {female} deep in conversation with someone other than {male}, his face clouds over. It might be jealousy.",
        "Everyone has noticed {male}'s eyes following {female}. Everyone except him.",
    ),
    "drama": (
        "Out of nowhere an argument breaks out between {male} and {female}. Everything that had been building up spills over.",
        "Tension runs through the island. An invisible game of moves starts among the contestants over {male} and {female}.",
        "Something {male} says hurts {female} without him meaning it to. Everyone holds their breath.",
    ),
    "introduction": (
        "{male} and {female} say hello for the first time, a tense moment of checking first impressions.",
    ),
    "ceremony": (
        "Three days of drama are over. The final coupling ceremony begins as the contestants hold their breath.",
        "Everyone gathers on the beach at sunset. Who ends up with whom? The ceremony opens under everyone's gaze.",
    ),
})

CEREMONY_NARRATIVES: tuple[str, ...] = (
    "Three days of drama finally come to a close. Under the stars everyone gathers on the beach and looks at one another. Who will choose whom? The moment has come.",
    "The final coupling ceremony begins. Memories of the island flash by as the contestants face the choice that decides everything.",
    "On the last night in the inferno, lit by the fire, everyone is together one more time. The final chapter: whose heart points where?",
)

REJECTION_RESPONSES: tuple[str, ...] = (
    "I can't go with you right now. I'm sorry.",
    "Let me think about it a little longer.",
)

DEFAULT_INVITE_MESSAGE = "Will you come to paradise with me?"
DEFAULT_INVITE_ACCEPTANCE = "...I'll go."
DEFAULT_TITLE = "Event"
DEFAULT_NARRATIVE = "Something happens between {male} and {female}."


def get_line(rng: random.Random, character_id: str, context: str) -> Line:
    lines = LINE_BANKS.get((character_id, context))
    if not lines:
        return PLACEHOLDER_LINE
    return rng.choice(lines)


def get_thought(rng: random.Random, character_id: str, positive: bool) -> str:
    thoughts = THOUGHT_BANKS.get((character_id, positive))
    if not thoughts:
        return PLACEHOLDER_THOUGHTS[positive]
    return rng.choice(thoughts)


def get_title(rng: random.Random, event_type: EventType) -> str:
    return rng.choice(TITLES.get(event_type) or (DEFAULT_TITLE,))


def get_narrative(
    rng: random.Random,
    event_type: EventType,
    male: str,
    female: str,
    day: int,
    time: str,
) -> str:
    template = rng.choice(NARRATIVES.get(event_type) or (DEFAULT_NARRATIVE,))
    return template.format(male=male, female=female, day=day, time=time)
