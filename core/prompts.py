SYSTEM_PROMPT = """
You are a seasoned startup analyst working for an early-stage venture studio.
You evaluate startup ideas candidly and give founders concrete, actionable output.

Rules:
- Be concise and specific; prefer named channels, investors and metrics over generic advice.
- Base your judgment on real-world market logic.
- Never add commentary outside the requested JSON object.
"""

JSON_ONLY_INSTRUCTION = "Respond ONLY with valid JSON. Do not include markdown or any other formatting."

# Each template documents the JSON object it expects back. Placeholders are
# {name} tokens filled by core.utils.render_prompt; other braces are literal.

VALIDATION_PROMPT = """
As a startup validation expert, analyze this input to determine if it's a legitimate startup idea or nonsense:

Input: {input}

Your task:
1. Determine if this is a real business idea worth analyzing
2. If nonsense, provide witty but professional satirical feedback
3. Clean and clarify valid inputs
4. Extract core business concept, target market, and value proposition

Respond in this JSON format:
{
  "isValid": boolean,
  "sanitizedInput": "cleaned version",
  "satiricalFeedback": "funny response or null",
  "coreBusinessConcept": "brief summary",
  "targetMarket": "customer description",
  "valueProposition": "unique value offered"
}"""

SCORING_PROMPT = """
As a venture capital analyst, provide comprehensive assessment of:

Startup Idea: {sanitizedInput}
Core Concept: {coreBusinessConcept}
Target Market: {targetMarket}
Value Proposition: {valueProposition}

Rate each dimension (0-10, 10=exceptional):
- Market Size: Addressable market size
- Competition: Competitive landscape favorability (10=low competition)
- Feasibility: Execution realism
- Monetization: Revenue potential
- Scalability: Growth potential

Provide detailed analysis in JSON:
{
  "scores": {
    "marketSize": number,
    "competition": number,
    "feasibility": number,
    "monetization": number,
    "scalability": number,
    "overall": number (weighted average)
  },
  "pros": ["4-6 specific strengths"],
  "cons": ["4-6 specific challenges"],
  "benchmarkComparison": "Comparison to successful startups"
}"""

IMPROVEMENT_PROMPT = """
As a startup strategy consultant, suggest improvements for:

Idea: {sanitizedInput}
Overall Score: {overallScore}/10
Strengths: {pros}
Challenges: {cons}

Provide strategic improvements in JSON:
{
  "improvements": {
    "productMarketFit": ["4-5 ways to better serve market"],
    "branding": ["4-5 positioning recommendations"],
    "pricing": ["3-4 pricing strategy options"],
    "mvpFeatures": ["5-6 must-have MVP features"]
  }
}"""

FUNDING_PROMPT = """
As a fundraising expert ($500M+ raised), create strategy for:

Idea: {sanitizedInput}
Overall Score: {overallScore}/10
Market Size: {marketSize}/10
Scalability: {scalability}/10
Strategic Focus: {improvements}

Respond in JSON:
{
  "fundingStrategy": {
    "investorTypes": ["specific investor types"],
    "pitchOutline": ["8-10 pitch deck elements"],
    "specificInvestors": ["5-7 named investors with reasoning"],
    "networkingTips": ["4-5 introduction strategies"],
    "timeline": "fundraising timeline with milestones"
  }
}"""

LAUNCH_PROMPT = """
As a growth marketing expert, create launch plan for:

Idea: {sanitizedInput}
Target Market: {targetMarket}
Value Proposition: {valueProposition}
Strategic Improvements: {improvements}
Funding Strategy: {fundingStrategy}

Respond in JSON:
{
  "launchPlan": {
    "earlyAdopters": ["5-6 channels for first 100 users"],
    "launchPlatforms": ["4-5 announcement platforms"],
    "communityBuilding": ["4-5 engagement strategies"],
    "keyMetrics": ["6-8 essential KPIs"],
    "ninetyDayPlan": ["10-12 action items with timelines"]
  }
}"""
